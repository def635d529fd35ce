from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from medidispense.domain.inventory.service import InventoryService
from medidispense.api.v1.inventory.schemas import SlotCreate, SlotUpdate, InventoryResponse
from medidispense.infrastructure.database import get_db

router = APIRouter(prefix="/inventory", tags=["Inventory"])


@router.get("", response_model=InventoryResponse)
async def get_inventory(db: AsyncSession = Depends(get_db)):
    """Current slots; the default three are created on first access"""
    inventory = await InventoryService(db).get_inventory()
    return InventoryResponse.model_validate(inventory)


@router.post("/servos", response_model=InventoryResponse, status_code=status.HTTP_201_CREATED)
async def add_slot(slot_in: SlotCreate, db: AsyncSession = Depends(get_db)):
    inventory = await InventoryService(db).add_slot(**slot_in.model_dump())
    return InventoryResponse.model_validate(inventory)


@router.put("/servos/{position}", response_model=InventoryResponse)
async def update_slot(position: int, slot_in: SlotUpdate, db: AsyncSession = Depends(get_db)):
    inventory = await InventoryService(db).update_slot(position, **slot_in.model_dump(exclude_unset=True))
    return InventoryResponse.model_validate(inventory)


@router.delete("/servos/{position}", response_model=InventoryResponse)
async def remove_slot(position: int, db: AsyncSession = Depends(get_db)):
    inventory = await InventoryService(db).remove_slot(position)
    return InventoryResponse.model_validate(inventory)
