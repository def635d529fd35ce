from typing import Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from medidispense.core.config import settings
from medidispense.core.exceptions import BusinessLogicError, NotFoundError
from medidispense.domain.inventory.models import Inventory, InventorySlot
from medidispense.domain.inventory.repository import InventoryRepository
from medidispense.domain.medicines import DEFAULT_SLOT_MEDICINES
from medidispense.infrastructure.redis import get_lock_service, INVENTORY_LOCK

logger = logging.getLogger(__name__)


def default_slots():
    capacity = settings.DEFAULT_SLOT_CAPACITY
    return [
        {"medicine": name, "stock": capacity, "capacity": capacity}
        for name in DEFAULT_SLOT_MEDICINES
    ]


class InventoryService:
    """
    Slot administration over the singleton inventory.

    Public methods take the inventory lock. ``load`` does not, so that the
    prescription validator can call it from inside its own critical section.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = InventoryRepository(db)

    async def load(self) -> Inventory:
        """Return the inventory, seeding the default slots on first access"""
        inventory = await self.repo.get()
        if inventory is None:
            inventory = await self.repo.create(default_slots())
            logger.info(f"Seeded inventory {inventory.id} with {len(inventory.slots)} default slots")
        return inventory

    async def get_inventory(self) -> Inventory:
        async with get_lock_service().lock(INVENTORY_LOCK):
            return await self.load()

    async def add_slot(self, medicine: str, stock: int = 0, capacity: Optional[int] = None) -> Inventory:
        async with get_lock_service().lock(INVENTORY_LOCK):
            inventory = await self.load()
            if len(inventory.slots) >= settings.MAX_SLOTS:
                raise BusinessLogicError(
                    message=f"Max servos is {settings.MAX_SLOTS}",
                    details={"max_slots": settings.MAX_SLOTS},
                    error_code="SLOT_LIMIT_REACHED"
                )

            slot = InventorySlot(
                medicine=medicine,
                stock=stock,
                capacity=settings.DEFAULT_SLOT_CAPACITY if capacity is None else capacity,
            )
            slot.clamp()
            inventory.slots.append(slot)
            inventory = await self.repo.save(inventory)
            logger.info(f"Added slot {slot.position} ({slot.medicine})")
            return inventory

    async def update_slot(
        self,
        position: int,
        medicine: Optional[str] = None,
        stock: Optional[int] = None,
        capacity: Optional[int] = None,
    ) -> Inventory:
        async with get_lock_service().lock(INVENTORY_LOCK):
            inventory = await self.load()
            slot = self._slot_at(inventory, position)

            if medicine is not None:
                slot.medicine = medicine
            if stock is not None:
                slot.stock = stock
            if capacity is not None:
                slot.capacity = capacity
            slot.clamp()

            return await self.repo.save(inventory)

    async def remove_slot(self, position: int) -> Inventory:
        async with get_lock_service().lock(INVENTORY_LOCK):
            inventory = await self.load()
            slot = self._slot_at(inventory, position)
            inventory.slots.remove(slot)
            inventory.slots.reorder()
            logger.info(f"Removed slot {position} ({slot.medicine})")
            return await self.repo.save(inventory)

    @staticmethod
    def _slot_at(inventory: Inventory, position: int) -> InventorySlot:
        for slot in inventory.slots:
            if slot.position == position:
                return slot
        raise NotFoundError(message="Servo not found", details={"position": position})
