"""
Wholesale Stock Movement Model
Audit trail of inbound and outbound stock changes
"""
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, Text, ForeignKey, Index
from wholesale.core.database import Base


class StockMovement(Base):
    """Stock movement history record"""
    __tablename__ = "stock_movements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    color = Column(String(50), nullable=True)
    size = Column(String(20), nullable=True)
    movement_type = Column(String(20), nullable=False, doc="inbound or outbound")
    quantity = Column(Integer, nullable=False, doc="Signed quantity change")
    notes = Column(Text, nullable=True)
    reference_id = Column(Integer, nullable=True)
    reference_type = Column(String(30), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)

    __table_args__ = (
        Index("idx_stock_movements_product", "product_id", "created_at"),
    )
