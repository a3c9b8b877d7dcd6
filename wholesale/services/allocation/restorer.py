"""
Stock restoration

Returns every allocation held by the collected orders to the stock book
so the allocator can recompute from a clean baseline.
"""
import logging
from typing import Iterable

from .working_set import OrderDemand, StockBook

logger = logging.getLogger("wholesale.allocation")


def restore_allocations(orders: Iterable[OrderDemand], book: StockBook) -> int:
    """
    Add allocated quantities back onto available stock and zero them.

    Items of products outside the book are left untouched. An item whose
    option no longer exists is zeroed without restoring anything.

    Returns:
        Total quantity put back into stock
    """
    restored = 0
    for order in orders:
        for item in order.items:
            if not book.covers(item.product_id) or item.allocated_quantity <= 0:
                continue

            level = book.get(item.key)
            if level is None:
                logger.warning(
                    f"No inventory option for {item.key} on order {order.order_number}; "
                    f"dropping {item.allocated_quantity} allocated without restore"
                )
            elif not level.rebuilt:
                level.available += item.allocated_quantity
                restored += item.allocated_quantity

            item.allocated_quantity = 0

    return restored
