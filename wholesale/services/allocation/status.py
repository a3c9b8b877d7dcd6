"""Order allocation state derived from line items"""
from enum import Enum
from typing import Iterable


class AllocationState(str, Enum):
    PENDING = "pending"
    PARTIALLY_ALLOCATED = "partially_allocated"
    FULLY_ALLOCATED = "fully_allocated"


def derive_allocation_state(items: Iterable) -> AllocationState:
    """
    Compute the allocation state of an order from its positive lines.

    Shipped units count as served, so an order that has shipped anything
    is never pending again.

    Works on ORM OrderItem rows and ItemDemand snapshots alike.
    """
    any_allocated = False
    all_covered = True

    for item in items:
        if item.quantity <= 0:
            continue
        shipped = item.shipped_quantity or 0
        outstanding = max(0, item.quantity - shipped)
        allocated = item.allocated_quantity or 0
        if allocated > 0 or shipped > 0:
            any_allocated = True
        if allocated < outstanding:
            all_covered = False

    if all_covered:
        return AllocationState.FULLY_ALLOCATED
    if any_allocated:
        return AllocationState.PARTIALLY_ALLOCATED
    return AllocationState.PENDING


def collapse_order_status(state: AllocationState) -> str:
    """Order status shown to customers: anything allocated is processing"""
    if state is AllocationState.PENDING:
        return "pending"
    return "processing"
