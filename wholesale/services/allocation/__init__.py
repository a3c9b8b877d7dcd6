"""Time-ordered inventory allocation for purchase orders"""

from .allocator import allocate_fifo
from .collector import collect_affected_orders, demanded_product_ids
from .restorer import restore_allocations
from .service import AllocationResult, AllocationService, OrderAllocation
from .status import AllocationState, collapse_order_status, derive_allocation_state
from .working_set import ItemDemand, ItemGrant, OrderDemand, StockBook, StockLevel

__all__ = [
    "AllocationResult",
    "AllocationService",
    "AllocationState",
    "ItemDemand",
    "ItemGrant",
    "OrderAllocation",
    "OrderDemand",
    "StockBook",
    "StockLevel",
    "allocate_fifo",
    "collapse_order_status",
    "collect_affected_orders",
    "demanded_product_ids",
    "derive_allocation_state",
    "restore_allocations",
]
