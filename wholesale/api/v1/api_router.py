"""
Main API Router - Consolidates all module routes
"""

from fastapi import APIRouter
from wholesale.api.v1 import admin, inventory, products, purchase_orders

api_router = APIRouter()

api_router.include_router(products.router, prefix="/products", tags=["products"])
api_router.include_router(inventory.router, prefix="/inventory", tags=["inventory"])
api_router.include_router(purchase_orders.router, prefix="/orders/purchase", tags=["purchase-orders"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
