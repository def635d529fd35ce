from typing import Optional
from datetime import datetime
from pydantic import BaseModel

from medidispense.domain.prescriptions.models import PrescriptionStatus


class DevicePrescription(BaseModel):
    tag_id: str
    patient_name: str
    paracetamol: int
    azithromycin: int
    revital: int
    frequency: str
    duration: str
    status: PrescriptionStatus
    created_at: datetime


class DispenseAcknowledgement(BaseModel):
    message: str
    tag_id: str
    status: PrescriptionStatus
    last_dispensed: Optional[datetime] = None
