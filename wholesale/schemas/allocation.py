"""Allocation Result Schemas"""

from pydantic import BaseModel
from typing import List, Optional

from .order import PurchaseOrder


class ItemGrant(BaseModel):
    order_id: int
    item_id: int
    product_id: int
    color: str
    size: str
    requested: int
    granted: int
    shortfall: int


class OrderAllocation(BaseModel):
    order_id: int
    order_number: str
    allocation_status: str
    status: str


class StockRemaining(BaseModel):
    product_id: int
    color: str
    size: str
    available: int


class AllocationSummary(BaseModel):
    product_ids: List[int]
    total_orders: int
    fully_allocated: int
    partially_allocated: int
    pending: int
    restored_quantity: int
    orders: List[OrderAllocation]
    grants: List[ItemGrant]
    remaining_stock: List[StockRemaining]

    @classmethod
    def from_result(cls, result) -> "AllocationSummary":
        """Build from a services.allocation.AllocationResult"""
        return cls(
            product_ids=result.product_ids,
            total_orders=len(result.orders),
            fully_allocated=result.fully_allocated,
            partially_allocated=result.partially_allocated,
            pending=result.pending,
            restored_quantity=result.restored_quantity,
            orders=[
                OrderAllocation(
                    order_id=order.order_id,
                    order_number=order.order_number,
                    allocation_status=order.state.value,
                    status=order.status,
                )
                for order in result.orders
            ],
            grants=[
                ItemGrant(
                    order_id=grant.order_id,
                    item_id=grant.item_id,
                    product_id=grant.product_id,
                    color=grant.color,
                    size=grant.size,
                    requested=grant.requested,
                    granted=grant.granted,
                    shortfall=grant.shortfall,
                )
                for grant in result.grants
            ],
            remaining_stock=[
                StockRemaining(product_id=product_id, color=color, size=size, available=available)
                for (product_id, color, size), available in sorted(result.remaining_stock.items())
            ],
        )


class PurchaseOrderResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    order: PurchaseOrder
    allocation: Optional[AllocationSummary] = None


class ReallocationResponse(BaseModel):
    success: bool = True
    message: str
    allocation: AllocationSummary
