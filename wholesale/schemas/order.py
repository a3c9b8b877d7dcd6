"""Purchase Order Schemas"""

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    CONFIRMED = "confirmed"
    PARTIAL = "partial"
    SHIPPED = "shipped"
    CANCELLED = "cancelled"


class PurchaseOrderItemIn(BaseModel):
    product_id: Optional[int] = None
    product_name: str = ""
    color: str = ""
    size: str = ""
    # Negative quantities are return lines
    quantity: int
    unit_price: Decimal = Field(default=0, ge=0)


class PurchaseOrderBase(BaseModel):
    items: List[PurchaseOrderItemIn] = []
    company_name: Optional[str] = None
    shipping_name: Optional[str] = None
    shipping_phone: Optional[str] = None
    shipping_address: Optional[str] = None
    shipping_postal_code: Optional[str] = None


class PurchaseOrderCreate(PurchaseOrderBase):
    user_id: Optional[int] = None


class PurchaseOrderUpdate(PurchaseOrderBase):
    pass


class OrderItem(BaseModel):
    id: int
    product_id: Optional[int] = None
    product_name: str
    color: str
    size: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    allocated_quantity: int
    shipped_quantity: int

    model_config = ConfigDict(from_attributes=True)


class PurchaseOrder(BaseModel):
    id: int
    order_number: str
    order_type: str
    status: str
    allocation_status: str
    user_id: Optional[int] = None
    company_name: Optional[str] = None
    shipping_name: Optional[str] = None
    shipping_phone: Optional[str] = None
    shipping_address: Optional[str] = None
    shipping_postal_code: Optional[str] = None
    total_amount: Decimal
    created_at: datetime
    updated_at: Optional[datetime] = None
    items: List[OrderItem] = []

    model_config = ConfigDict(from_attributes=True)


class PurchaseOrderListResponse(BaseModel):
    orders: List[PurchaseOrder]
    total: int
    skip: int
    limit: int
