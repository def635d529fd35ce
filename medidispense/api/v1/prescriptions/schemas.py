from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from medidispense.domain.prescriptions.models import PrescriptionStatus


class PrescriptionCreate(BaseModel):
    tag_id: str = Field(..., min_length=1, max_length=64)
    paracetamol: int = Field(0, ge=0)
    azithromycin: int = Field(0, ge=0)
    revital: int = Field(0, ge=0)
    frequency: str = Field(..., min_length=1)
    duration: str = Field(..., min_length=1)


class PrescriptionStatusUpdate(BaseModel):
    status: PrescriptionStatus


class PrescriptionResponse(BaseModel):
    id: str
    tag_id: str
    paracetamol: int
    azithromycin: int
    revital: int
    frequency: str
    duration: str
    status: PrescriptionStatus
    last_dispensed: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PrescriptionCreatedResponse(BaseModel):
    prescription: PrescriptionResponse
    alerts: List[str] = []
