from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete

from medidispense.domain.patients.models import Patient


class PatientRepository:
    """Repository for patient data access operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, patient_data: dict) -> Patient:
        """Create a new patient"""
        patient = Patient(**patient_data)
        self.db.add(patient)
        await self.db.commit()
        await self.db.refresh(patient)
        return patient

    async def get_by_tag(self, tag_id: str) -> Optional[Patient]:
        """Get patient by RFID tag"""
        result = await self.db.execute(select(Patient).where(Patient.tag_id == tag_id))
        return result.scalar_one_or_none()

    async def get_all(self) -> List[Patient]:
        result = await self.db.execute(select(Patient).order_by(Patient.created_at.desc()))
        return list(result.scalars().all())

    async def update(self, patient: Patient, update_data: dict) -> Patient:
        """Update patient information"""
        for field, value in update_data.items():
            setattr(patient, field, value)
        await self.db.commit()
        await self.db.refresh(patient)
        return patient

    async def delete(self, tag_id: str) -> bool:
        """Delete patient record"""
        result = await self.db.execute(delete(Patient).where(Patient.tag_id == tag_id))
        await self.db.commit()
        return result.rowcount > 0
