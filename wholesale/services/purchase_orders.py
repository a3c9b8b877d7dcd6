"""
Purchase Order Service
Creates, edits and cancels purchase orders, reallocating stock in the same transaction
"""
import logging
import time
from decimal import Decimal, ROUND_FLOOR
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from wholesale.core.config import settings
from wholesale.core.exceptions import BusinessLogicError, NotFoundError, ValidationError
from wholesale.models.order import Order, OrderItem
from wholesale.models.product import Product
from wholesale.schemas.order import PurchaseOrderCreate, PurchaseOrderItemIn, PurchaseOrderUpdate
from wholesale.services.allocation import AllocationResult, AllocationService, demanded_product_ids

logger = logging.getLogger("wholesale.api")


def calculate_line_total(unit_price: Decimal, quantity: int, vat_rate: float) -> Decimal:
    """Supply amount plus VAT floored to the whole currency unit"""
    supply = Decimal(unit_price) * quantity
    vat = (supply * Decimal(str(vat_rate))).to_integral_value(rounding=ROUND_FLOOR)
    return supply + vat


def calculate_order_total(items: Iterable[PurchaseOrderItemIn], vat_rate: Optional[float] = None) -> Decimal:
    rate = settings.VAT_RATE if vat_rate is None else vat_rate
    return sum(
        (calculate_line_total(item.unit_price, item.quantity, rate) for item in items),
        Decimal("0"),
    )


class PurchaseOrderService:
    """Purchase order lifecycle"""

    def __init__(self, db: Session):
        self.db = db
        self.allocation = AllocationService(db)

    def get_purchase_order(self, order_id: int) -> Order:
        order = (
            self.db.query(Order)
            .options(selectinload(Order.items))
            .filter(Order.id == order_id, Order.order_type == "purchase")
            .first()
        )
        if not order:
            raise NotFoundError(f"Purchase order {order_id} not found")
        return order

    def list_purchase_orders(self, status: Optional[str] = None, skip: int = 0,
                             limit: int = 100) -> Tuple[List[Order], int]:
        query = self.db.query(Order).filter(Order.order_type == "purchase")
        if status:
            query = query.filter(Order.status == status)

        total = query.count()
        orders = (
            query.options(selectinload(Order.items))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return orders, total

    def create_purchase_order(self, order_in: PurchaseOrderCreate) -> Tuple[Order, AllocationResult]:
        """
        Create a purchase order and allocate stock to it.

        The order is inserted as pending and the allocation pass runs over
        every product it demands before anything is committed.
        """
        if not order_in.items:
            raise ValidationError("Purchase order has no items")
        self._validate_products(order_in.items)

        try:
            order = Order(
                order_number=self._next_order_number(),
                order_type="purchase",
                status="pending",
                allocation_status="pending",
                user_id=order_in.user_id,
                company_name=order_in.company_name,
                shipping_name=order_in.shipping_name,
                shipping_phone=order_in.shipping_phone,
                shipping_address=order_in.shipping_address,
                shipping_postal_code=order_in.shipping_postal_code,
                total_amount=calculate_order_total(order_in.items),
            )
            order.items = [self._build_item(item) for item in order_in.items]
            self.db.add(order)
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Purchase order creation failed: {e}")
            raise

        result = self.allocation.reallocate(demanded_product_ids(order.items), commit=False)
        self._commit()
        self.db.refresh(order)

        logger.info(f"Purchase order {order.order_number} created with status {order.status}")
        return order, result

    def update_purchase_order(self, order_id: int,
                              order_in: PurchaseOrderUpdate) -> Tuple[Order, AllocationResult]:
        """
        Replace the lines and shipping details of an open purchase order.

        The creation time is kept, so the order keeps its place in the queue.
        Products dropped from the order are reallocated along with the new ones.
        """
        order = self.get_purchase_order(order_id)
        self._ensure_open(order)
        if any((item.shipped_quantity or 0) > 0 for item in order.items):
            raise BusinessLogicError(
                f"Purchase order {order.order_number} has shipped items and cannot be edited"
            )
        if not order_in.items:
            raise ValidationError("Purchase order has no items")
        self._validate_products(order_in.items)

        previous_products = demanded_product_ids(order.items)

        try:
            self.allocation.release_items(order.items)
            order.items.clear()
            self.db.flush()

            order.items.extend(self._build_item(item) for item in order_in.items)
            order.company_name = order_in.company_name
            order.shipping_name = order_in.shipping_name
            order.shipping_phone = order_in.shipping_phone
            order.shipping_address = order_in.shipping_address
            order.shipping_postal_code = order_in.shipping_postal_code
            order.total_amount = calculate_order_total(order_in.items)
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Purchase order {order_id} update failed: {e}")
            raise

        result = self.allocation.reallocate(
            previous_products | demanded_product_ids(order.items), commit=False
        )
        self._commit()
        self.db.refresh(order)

        logger.info(f"Purchase order {order.order_number} updated with status {order.status}")
        return order, result

    def cancel_purchase_order(self, order_id: int) -> Tuple[Order, AllocationResult]:
        """Cancel an open order and hand its stock to the orders behind it"""
        order = self.get_purchase_order(order_id)
        self._ensure_open(order)

        product_ids = demanded_product_ids(order.items)
        try:
            self.allocation.release_items(order.items)
            order.status = "cancelled"
            order.allocation_status = "pending"
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Purchase order {order_id} cancellation failed: {e}")
            raise

        result = self.allocation.reallocate(product_ids, commit=False)
        self._commit()
        self.db.refresh(order)

        logger.info(f"Purchase order {order.order_number} cancelled")
        return order, result

    def _ensure_open(self, order: Order):
        if order.status not in settings.OPEN_ORDER_STATUSES:
            raise BusinessLogicError(
                f"Cannot modify purchase order {order.order_number} with status {order.status}"
            )

    def _validate_products(self, items: Iterable[PurchaseOrderItemIn]):
        product_ids = {item.product_id for item in items if item.product_id is not None}
        if not product_ids:
            return
        found = {
            row.id for row in self.db.query(Product.id).filter(Product.id.in_(product_ids)).all()
        }
        missing = sorted(product_ids - found)
        if missing:
            raise NotFoundError(f"Products not found: {missing}")

    def _build_item(self, item: PurchaseOrderItemIn) -> OrderItem:
        return OrderItem(
            product_id=item.product_id,
            product_name=item.product_name,
            color=item.color,
            size=item.size,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_price=Decimal(item.unit_price) * item.quantity,
            allocated_quantity=0,
            shipped_quantity=0,
        )

    def _next_order_number(self) -> str:
        base = f"{settings.PURCHASE_ORDER_PREFIX}{int(time.time() * 1000)}"
        number, suffix = base, 1
        while self.db.query(Order.id).filter(Order.order_number == number).first():
            number = f"{base}-{suffix}"
            suffix += 1
        return number

    def _commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Commit failed: {e}")
            raise
