"""Admin allocation endpoints"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from wholesale.api import deps
from wholesale.schemas.allocation import AllocationSummary, ReallocationResponse
from wholesale.services.allocation import AllocationService

router = APIRouter()


@router.post("/allocation/reset-and-reallocate", response_model=ReallocationResponse)
async def reset_and_reallocate(
    db: Session = Depends(deps.get_db),
):
    """
    Reset every allocation and rerun FIFO allocation over all open purchase orders.
    """
    result = AllocationService(db).reset_and_reallocate()
    return ReallocationResponse(
        message="Reset and reallocation completed",
        allocation=AllocationSummary.from_result(result),
    )
