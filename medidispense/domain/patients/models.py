from sqlalchemy import Column, String, Integer, DateTime, Text, Enum
import enum
import uuid
from datetime import datetime

from medidispense.infrastructure.database import Base


def gen_uuid():
    return str(uuid.uuid4())


class Gender(str, enum.Enum):
    """Gender enumeration"""
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class PatientStatus(str, enum.Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class Patient(Base):
    """Patient registered against a physical RFID tag"""
    __tablename__ = "patients"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    tag_id = Column(String(64), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    age = Column(Integer, nullable=False)
    gender = Column(Enum(Gender), nullable=False)
    condition = Column(Text, nullable=False)
    status = Column(Enum(PatientStatus), nullable=False, default=PatientStatus.ACTIVE)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
