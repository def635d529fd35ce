from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from medidispense.domain.dispensing_logs.models import DispenseOutcome


class MedicineQuantities(BaseModel):
    paracetamol: int = Field(0, ge=0)
    azithromycin: int = Field(0, ge=0)
    revital: int = Field(0, ge=0)


class DispensingLogCreate(BaseModel):
    tag_id: str = Field(..., min_length=1, max_length=64)
    status: DispenseOutcome
    patient_name: Optional[str] = None
    medicines: Optional[MedicineQuantities] = None
    error_message: Optional[str] = None


class DispensingLogResponse(BaseModel):
    id: str
    tag_id: str
    patient_name: str
    medicines: Optional[MedicineQuantities] = None
    status: DispenseOutcome
    error_message: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
