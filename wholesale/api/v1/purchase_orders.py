"""Purchase Order API endpoints"""

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from wholesale.api import deps
from wholesale.core.exceptions import BusinessLogicError, NotFoundError, ValidationError
from wholesale.schemas.allocation import AllocationSummary, PurchaseOrderResponse
from wholesale.schemas.order import (
    OrderStatus, PurchaseOrder, PurchaseOrderCreate, PurchaseOrderListResponse, PurchaseOrderUpdate
)
from wholesale.services.purchase_orders import PurchaseOrderService
from wholesale.services.shipment import ShipmentService

router = APIRouter()


def _raise_http(exc: Exception):
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("", response_model=PurchaseOrderListResponse)
async def list_purchase_orders(
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    pagination: dict = Depends(deps.get_pagination_params),
    db: Session = Depends(deps.get_db),
):
    """List purchase orders, newest first."""
    orders, total = PurchaseOrderService(db).list_purchase_orders(
        status=status.value if status else None,
        **pagination
    )
    return PurchaseOrderListResponse(
        orders=orders,
        total=total,
        skip=pagination["skip"],
        limit=pagination["limit"]
    )


@router.get("/{order_id}", response_model=PurchaseOrder)
async def get_purchase_order(
    order_id: int,
    db: Session = Depends(deps.get_db),
):
    """Get specific purchase order by ID."""
    try:
        return PurchaseOrderService(db).get_purchase_order(order_id)
    except NotFoundError as e:
        _raise_http(e)


@router.post("", response_model=PurchaseOrderResponse, status_code=status.HTTP_201_CREATED)
async def create_purchase_order(
    order_in: PurchaseOrderCreate,
    db: Session = Depends(deps.get_db),
):
    """
    Create new purchase order.

    Stock is allocated across every open order competing for the same
    products, oldest first, before the response is returned.
    """
    try:
        order, result = PurchaseOrderService(db).create_purchase_order(order_in)
    except (NotFoundError, ValidationError) as e:
        _raise_http(e)

    return PurchaseOrderResponse(
        message="Purchase order created",
        order=PurchaseOrder.model_validate(order),
        allocation=AllocationSummary.from_result(result),
    )


@router.put("/{order_id}", response_model=PurchaseOrderResponse)
async def update_purchase_order(
    order_id: int,
    order_in: PurchaseOrderUpdate,
    db: Session = Depends(deps.get_db),
):
    """
    Update purchase order lines.

    Only open orders without shipped items can be updated. The order keeps
    its original place in the allocation queue.
    """
    try:
        order, result = PurchaseOrderService(db).update_purchase_order(order_id, order_in)
    except (NotFoundError, ValidationError, BusinessLogicError) as e:
        _raise_http(e)

    return PurchaseOrderResponse(
        message="Purchase order updated",
        order=PurchaseOrder.model_validate(order),
        allocation=AllocationSummary.from_result(result),
    )


@router.post("/{order_id}/cancel", response_model=PurchaseOrderResponse)
async def cancel_purchase_order(
    order_id: int,
    db: Session = Depends(deps.get_db),
):
    """Cancel purchase order and reallocate its stock to waiting orders."""
    try:
        order, result = PurchaseOrderService(db).cancel_purchase_order(order_id)
    except (NotFoundError, BusinessLogicError) as e:
        _raise_http(e)

    return PurchaseOrderResponse(
        message="Purchase order cancelled",
        order=PurchaseOrder.model_validate(order),
        allocation=AllocationSummary.from_result(result),
    )


@router.post("/{order_id}/ship", response_model=PurchaseOrderResponse)
async def ship_purchase_order(
    order_id: int,
    db: Session = Depends(deps.get_db),
):
    """Confirm physical shipment of everything currently allocated to the order."""
    try:
        order = ShipmentService(db).confirm_shipment(order_id)
    except (NotFoundError, BusinessLogicError) as e:
        _raise_http(e)

    return PurchaseOrderResponse(
        message="Shipment confirmed",
        order=PurchaseOrder.model_validate(order),
    )
