from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from medidispense.domain.patients.models import Gender, PatientStatus


class PatientBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    age: int = Field(..., ge=0, le=150)
    gender: Gender
    condition: str = Field(..., min_length=1)


class PatientCreate(PatientBase):
    tag_id: str = Field(..., min_length=1, max_length=64)


class PatientUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    age: Optional[int] = Field(None, ge=0, le=150)
    gender: Optional[Gender] = None
    condition: Optional[str] = None
    status: Optional[PatientStatus] = None


class PatientResponse(PatientBase):
    tag_id: str
    status: PatientStatus
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    message: str
