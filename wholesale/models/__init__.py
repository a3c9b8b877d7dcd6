"""
Wholesale Database Models
"""
from .product import Product, InventoryOption
from .order import Order, OrderItem
from .stock import StockMovement

__all__ = [
    "Product",
    "InventoryOption",
    "Order",
    "OrderItem",
    "StockMovement",
]
