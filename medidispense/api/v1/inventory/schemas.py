from typing import List, Optional
from datetime import datetime
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SlotCreate(BaseModel):
    # out-of-range stock/capacity are clamped by the service, not rejected
    medicine: str = Field(..., min_length=1, max_length=100)
    stock: int = 0
    capacity: Optional[int] = None


class SlotUpdate(BaseModel):
    medicine: Optional[str] = Field(None, min_length=1, max_length=100)
    stock: Optional[int] = None
    capacity: Optional[int] = None


class SlotResponse(BaseModel):
    position: int
    medicine: str
    stock: int
    capacity: int

    model_config = ConfigDict(from_attributes=True)


class InventoryResponse(BaseModel):
    id: str
    servos: List[SlotResponse] = Field(validation_alias=AliasChoices("slots", "servos"))
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
