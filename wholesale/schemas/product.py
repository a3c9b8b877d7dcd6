"""Product and Inventory Schemas"""

from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal


class InventoryOptionBase(BaseModel):
    color: str = Field(..., min_length=1, max_length=50)
    size: str = Field(..., min_length=1, max_length=20)
    stock_quantity: Optional[int] = Field(None, ge=0)
    physical_stock: Optional[int] = Field(None, ge=0)
    allocated_stock: Optional[int] = Field(None, ge=0)


class InventoryOptionCreate(InventoryOptionBase):
    pass


class InventoryOption(InventoryOptionBase):
    id: int
    available_stock: int

    model_config = ConfigDict(from_attributes=True)


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    code: str = Field(..., min_length=1, max_length=50)
    price: Decimal = Field(default=0, ge=0)


class ProductCreate(ProductBase):
    stock_quantity: int = Field(default=0, ge=0)
    inventory_options: List[InventoryOptionCreate] = []

    @field_validator("inventory_options")
    @classmethod
    def unique_option_keys(cls, v):
        keys = [(option.color, option.size) for option in v]
        if len(keys) != len(set(keys)):
            raise ValueError("Duplicate color/size inventory option")
        return v


class Product(ProductBase):
    id: int
    stock_quantity: int
    inventory_options: List[InventoryOption] = []
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class InboundCreate(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0)
    reason: str
    color: Optional[str] = None
    size: Optional[str] = None


class InboundResponse(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    reason: str
    color: Optional[str] = None
    size: Optional[str] = None
    stock_quantity: int
