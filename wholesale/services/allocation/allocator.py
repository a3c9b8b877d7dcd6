"""
FIFO allocation

Older orders exhaust available stock before younger ones receive any.
Line items may be partially granted.
"""
import logging
from operator import attrgetter
from typing import Iterable, List

from .working_set import ItemGrant, OrderDemand, StockBook

logger = logging.getLogger("wholesale.allocation")


def allocate_fifo(orders: Iterable[OrderDemand], book: StockBook) -> List[ItemGrant]:
    """
    Grant stock to line items in order creation sequence.

    Each covered item receives min(outstanding, available), never less
    than zero. Items whose option cannot be resolved receive nothing.
    sorted() is stable, so orders with equal timestamps keep input order.
    """
    grants: List[ItemGrant] = []

    for order in sorted(orders, key=attrgetter("created_at")):
        for item in order.items:
            if not book.covers(item.product_id):
                continue

            requested = item.outstanding
            level = book.get(item.key)
            available = level.available if level is not None else 0
            granted = max(0, min(requested, available))

            if granted:
                level.available -= granted
            item.allocated_quantity = granted

            if requested <= 0:
                continue

            grant = ItemGrant(
                order_id=order.order_id,
                item_id=item.item_id,
                product_id=item.product_id,
                color=item.color,
                size=item.size,
                requested=requested,
                granted=granted,
            )
            grants.append(grant)

            if grant.shortfall:
                logger.debug(
                    f"Short {grant.shortfall} on {order.order_number} "
                    f"{item.color}/{item.size}: requested {requested}, granted {granted}"
                )

    return grants
