# Inventory domain module
from medidispense.domain.inventory.models import Inventory, InventorySlot

__all__ = [
    "Inventory",
    "InventorySlot",
]
