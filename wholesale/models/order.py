"""
Wholesale Order Models
SQLAlchemy models for purchase orders and their line items
"""
from datetime import datetime
from sqlalchemy import (
    Column, String, Integer, Numeric, DateTime, ForeignKey, CheckConstraint, Index
)
from sqlalchemy.orm import relationship
from wholesale.core.database import Base


class Order(Base):
    """
    Customer order header

    `status` is a cached summary recomputed by every allocation pass;
    `allocation_status` keeps the uncollapsed allocation state.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_number = Column(String(40), nullable=False, unique=True)
    order_type = Column(String(20), nullable=False, default="purchase")
    status = Column(String(20), nullable=False, default="pending")
    allocation_status = Column(String(30), nullable=False, default="pending")

    user_id = Column(Integer, nullable=True)
    company_name = Column(String(200), nullable=True)
    shipping_name = Column(String(100), nullable=True)
    shipping_phone = Column(String(40), nullable=True)
    shipping_address = Column(String(300), nullable=True)
    shipping_postal_code = Column(String(20), nullable=True)

    total_amount = Column(Numeric(15, 2), default=0)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    __table_args__ = (
        CheckConstraint(
            "order_type IN ('purchase', 'sample', 'return')",
            name="valid_order_type",
        ),
        Index("idx_orders_status_created", "status", "created_at"),
    )


class OrderItem(Base):
    """
    Order line item

    `allocated_quantity` is stock reserved by the allocation pass;
    `shipped_quantity` only changes when a shipment is confirmed.
    A negative `quantity` is a return line and is never allocated.
    """
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    product_name = Column(String(200), nullable=False, default="")
    color = Column(String(50), nullable=False, default="")
    size = Column(String(20), nullable=False, default="")

    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(15, 2), default=0)
    total_price = Column(Numeric(15, 2), default=0)

    allocated_quantity = Column(Integer, nullable=False, default=0)
    shipped_quantity = Column(Integer, nullable=False, default=0)

    order = relationship("Order", back_populates="items")

    __table_args__ = (
        CheckConstraint("allocated_quantity >= 0", name="allocated_not_negative"),
        CheckConstraint("shipped_quantity >= 0", name="shipped_not_negative"),
        Index("idx_order_items_product", "product_id", "color", "size"),
    )

    @property
    def outstanding_quantity(self) -> int:
        """Demand not yet physically shipped"""
        return max(0, (self.quantity or 0) - (self.shipped_quantity or 0))
