from sqlalchemy import Column, String, Integer, DateTime, Enum
import enum
import uuid
from datetime import datetime

from medidispense.infrastructure.database import Base


def gen_uuid():
    return str(uuid.uuid4())


class PrescriptionStatus(str, enum.Enum):
    PENDING = "Pending"
    DISPENSED = "Dispensed"
    CANCELLED = "Cancelled"


TERMINAL_STATUSES = (PrescriptionStatus.DISPENSED, PrescriptionStatus.CANCELLED)


class Prescription(Base):
    """Medication ordered for the patient holding ``tag_id``"""
    __tablename__ = "prescriptions"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    tag_id = Column(String(64), nullable=False, index=True)

    # one column per Medicine member
    paracetamol = Column(Integer, nullable=False, default=0)
    azithromycin = Column(Integer, nullable=False, default=0)
    revital = Column(Integer, nullable=False, default=0)

    frequency = Column(String(255), nullable=False)
    duration = Column(String(255), nullable=False)
    status = Column(Enum(PrescriptionStatus), nullable=False, default=PrescriptionStatus.PENDING, index=True)
    last_dispensed = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
