"""Inventory API endpoints"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from wholesale.api import deps
from wholesale.core.exceptions import NotFoundError, ValidationError
from wholesale.schemas.allocation import AllocationSummary
from wholesale.schemas.product import InboundCreate, InboundResponse
from wholesale.services.inventory import InventoryService

router = APIRouter()


@router.post("/inbound")
async def register_inbound(
    inbound_in: InboundCreate,
    db: Session = Depends(deps.get_db),
):
    """
    Register received stock.

    Waiting purchase orders for the product are reallocated immediately.
    """
    try:
        product, result = InventoryService(db).register_inbound(inbound_in)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return {
        "success": True,
        "message": f"{inbound_in.quantity} units received",
        "data": InboundResponse(
            product_id=product.id,
            product_name=product.name,
            quantity=inbound_in.quantity,
            reason=inbound_in.reason.strip(),
            color=inbound_in.color,
            size=inbound_in.size,
            stock_quantity=product.stock_quantity,
        ),
        "allocation": AllocationSummary.from_result(result),
    }
