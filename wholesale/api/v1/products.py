"""Product API endpoints"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from wholesale.api import deps
from wholesale.core.exceptions import NotFoundError, ValidationError
from wholesale.schemas.product import Product, ProductCreate
from wholesale.services.inventory import InventoryService

router = APIRouter()


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_in: ProductCreate,
    db: Session = Depends(deps.get_db),
):
    """Create product with its color/size inventory options."""
    try:
        return InventoryService(db).create_product(product_in)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/{product_id}", response_model=Product)
async def get_product(
    product_id: int,
    db: Session = Depends(deps.get_db),
):
    """Get product with current stock per option."""
    try:
        return InventoryService(db).get_product(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
