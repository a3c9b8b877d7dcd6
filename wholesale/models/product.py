"""
Wholesale Product Models
SQLAlchemy models for the product catalog and its color/size inventory
"""
from datetime import datetime
from sqlalchemy import (
    Column, String, Integer, Numeric, DateTime, ForeignKey, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship
from wholesale.core.database import Base


class Product(Base):
    """
    Product master

    `stock_quantity` is the legacy product-level scalar. For products with
    inventory options it is kept as the total of option availability;
    products without options allocate directly from it.
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False, doc="Product name")
    code = Column(String(50), nullable=False, unique=True, doc="Product code")
    price = Column(Numeric(15, 2), default=0, doc="Wholesale unit price")
    stock_quantity = Column(Integer, default=0, doc="Total available stock")

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    inventory_options = relationship(
        "InventoryOption",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="InventoryOption.id",
    )

    def find_option(self, color: str, size: str):
        """Return the option matching color and size, or None"""
        for option in self.inventory_options:
            if option.color == color and option.size == size:
                return option
        return None

    def refresh_stock_quantity(self):
        """Recompute the product total from option availability"""
        if self.inventory_options:
            self.stock_quantity = sum(
                max(0, option.available_stock) for option in self.inventory_options
            )


class InventoryOption(Base):
    """
    Stock held for one (color, size) of a product

    Two stock representations coexist. Newer rows carry `physical_stock`
    (total owned) and `allocated_stock` (reserved against open orders);
    older rows only carry the `stock_quantity` scalar, which is the
    available quantity itself.
    """
    __tablename__ = "inventory_options"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    color = Column(String(50), nullable=False)
    size = Column(String(20), nullable=False)

    stock_quantity = Column(Integer, nullable=True, doc="Legacy available stock")
    physical_stock = Column(Integer, nullable=True, doc="Units physically owned")
    allocated_stock = Column(Integer, nullable=True, doc="Units reserved for open orders")

    product = relationship("Product", back_populates="inventory_options")

    __table_args__ = (
        UniqueConstraint("product_id", "color", "size", name="uq_inventory_option_key"),
        Index("idx_inventory_option_product", "product_id"),
    )

    @property
    def tracks_physical(self) -> bool:
        return self.physical_stock is not None or self.allocated_stock is not None

    @property
    def available_stock(self) -> int:
        if self.tracks_physical:
            return (self.physical_stock or 0) - (self.allocated_stock or 0)
        return self.stock_quantity or 0
