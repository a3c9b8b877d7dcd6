"""
Demand collection

Finds every open purchase order competing for stock of a set of products.
"""
from typing import Iterable, List, Optional, Set

from sqlalchemy.orm import Session, selectinload

from wholesale.core.config import settings
from wholesale.models.order import Order, OrderItem


def demanded_product_ids(items: Iterable) -> Set[int]:
    """Product ids of line items that request a positive quantity"""
    return {
        item.product_id
        for item in items
        if item.product_id is not None and (item.quantity or 0) > 0
    }


def collect_affected_orders(
    db: Session,
    product_ids: Iterable[int],
    open_statuses: Optional[List[str]] = None,
) -> List[Order]:
    """
    Open purchase orders with outstanding demand for any of the products.

    Orders come back oldest first; orders sharing a timestamp keep id order.
    Cancelled, shipped and return-only orders are never returned.
    """
    ids = sorted(set(product_ids))
    if not ids:
        return []

    statuses = open_statuses or settings.OPEN_ORDER_STATUSES

    demanding_orders = (
        db.query(OrderItem.order_id)
        .filter(
            OrderItem.product_id.in_(ids),
            OrderItem.quantity > 0,
            OrderItem.quantity > OrderItem.shipped_quantity,
        )
        .distinct()
    )

    return (
        db.query(Order)
        .options(selectinload(Order.items))
        .filter(
            Order.order_type == "purchase",
            Order.status.in_(statuses),
            Order.id.in_(demanding_orders),
        )
        .order_by(Order.created_at.asc(), Order.id.asc())
        .all()
    )
