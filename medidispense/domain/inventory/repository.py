from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from medidispense.domain.inventory.models import Inventory, InventorySlot


class InventoryRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self) -> Optional[Inventory]:
        """Load the inventory row with its slots, bypassing stale identity-map state"""
        result = await self.db.execute(
            select(Inventory)
            .order_by(Inventory.created_at)
            .limit(1)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def create(self, slots: List[dict]) -> Inventory:
        inventory = Inventory()
        for slot_data in slots:
            inventory.slots.append(InventorySlot(**slot_data))
        self.db.add(inventory)
        await self.db.commit()
        await self.db.refresh(inventory)
        return inventory

    async def stage(self, inventory: Inventory) -> None:
        """Flush slot changes so the caller's next commit carries them"""
        inventory.touch()
        await self.db.flush()

    async def save(self, inventory: Inventory) -> Inventory:
        inventory.touch()
        await self.db.commit()
        await self.db.refresh(inventory)
        return inventory
