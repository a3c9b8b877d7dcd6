"""
Shipment Service
Turns allocated stock into physically shipped stock
"""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from wholesale.core.config import settings
from wholesale.core.exceptions import BusinessLogicError, NotFoundError
from wholesale.models.order import Order
from wholesale.models.stock import StockMovement
from wholesale.services.allocation import (
    AllocationService, AllocationState, collapse_order_status, derive_allocation_state
)

logger = logging.getLogger("wholesale.api")


class ShipmentService:
    """
    Shipment confirmation

    Each allocated quantity leaves physical stock and the allocated reserve
    together, and moves from the item's allocated to its shipped quantity.
    Legacy options and products without options already lost the units
    from their available scalar when they were allocated, so only the item
    changes for them.
    """

    def __init__(self, db: Session):
        self.db = db
        self.allocation = AllocationService(db)

    def confirm_shipment(self, order_id: int) -> Order:
        order = (
            self.db.query(Order)
            .options(selectinload(Order.items))
            .filter(Order.id == order_id)
            .first()
        )
        if not order:
            raise NotFoundError(f"Order {order_id} not found")
        if order.status not in settings.OPEN_ORDER_STATUSES:
            raise BusinessLogicError(f"Cannot ship order {order.order_number} with status {order.status}")

        items = [item for item in order.items if item.quantity > 0 and (item.allocated_quantity or 0) > 0]
        if not items:
            raise BusinessLogicError(f"Order {order.order_number} has no allocated stock to ship")

        try:
            products = self.allocation.lock_products({item.product_id for item in items})
            options = {
                (option.product_id, option.color, option.size): option
                for product in products
                for option in product.inventory_options
            }

            shipped_units = 0
            for item in items:
                quantity = item.allocated_quantity
                shipped_units += quantity
                option = options.get((item.product_id, item.color, item.size))
                if option is not None and option.tracks_physical:
                    option.physical_stock = max(0, (option.physical_stock or 0) - quantity)
                    option.allocated_stock = max(0, (option.allocated_stock or 0) - quantity)

                item.shipped_quantity = (item.shipped_quantity or 0) + quantity
                item.allocated_quantity = 0

                self.db.add(StockMovement(
                    product_id=item.product_id,
                    color=item.color,
                    size=item.size,
                    movement_type="outbound",
                    quantity=-quantity,
                    notes=f"Shipment of {order.order_number} - {item.color}/{item.size}",
                    reference_id=order.id,
                    reference_type="order",
                ))

            for product in products:
                product.refresh_stock_quantity()

            positive_items = [item for item in order.items if item.quantity > 0]
            if all(item.shipped_quantity >= item.quantity for item in positive_items):
                order.status = "shipped"
                order.allocation_status = AllocationState.FULLY_ALLOCATED.value
            else:
                state = derive_allocation_state(order.items)
                order.allocation_status = state.value
                order.status = collapse_order_status(state)

            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Shipment confirmation failed for order {order_id}: {e}")
            raise

        self.db.refresh(order)
        logger.info(
            f"Shipped {shipped_units} units on "
            f"{order.order_number}, status {order.status}"
        )
        return order
