"""Wholesale business services"""

from .allocation import AllocationService
from .inventory import InventoryService
from .purchase_orders import PurchaseOrderService
from .shipment import ShipmentService

__all__ = [
    "AllocationService",
    "InventoryService",
    "PurchaseOrderService",
    "ShipmentService",
]
