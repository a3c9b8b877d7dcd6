"""
Wholesale Pydantic Schemas
Request/Response models for the wholesale API
"""

from .product import (
    InventoryOptionCreate, InventoryOption, ProductCreate, Product,
    InboundCreate, InboundResponse
)
from .order import (
    OrderStatus, PurchaseOrderItemIn, PurchaseOrderCreate, PurchaseOrderUpdate,
    OrderItem, PurchaseOrder, PurchaseOrderListResponse
)
from .allocation import (
    AllocationSummary, PurchaseOrderResponse, ReallocationResponse
)
