from sqlalchemy import Column, String, DateTime, Text, JSON, Enum
import enum
import uuid
from datetime import datetime

from medidispense.infrastructure.database import Base


def gen_uuid():
    return str(uuid.uuid4())


class DispenseOutcome(str, enum.Enum):
    SUCCESS = "Success"
    FAILURE = "Failure"


class DispensingLog(Base):
    """Append-only audit entry for one dispense attempt"""
    __tablename__ = "dispensing_logs"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    tag_id = Column(String(64), nullable=False, index=True)
    patient_name = Column(String(200), nullable=False)
    # {"paracetamol": n, ...}; NULL when no prescription was involved
    medicines = Column(JSON, nullable=True)
    status = Column(Enum(DispenseOutcome), nullable=False)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
