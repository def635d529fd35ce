from typing import List
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from medidispense.core.exceptions import ConflictError, NotFoundError
from medidispense.domain.patients.models import Patient
from medidispense.domain.patients.repository import PatientRepository

logger = logging.getLogger(__name__)

UNKNOWN_PATIENT = "Unknown"


class PatientService:
    """Service layer for patient registry operations"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.patient_repo = PatientRepository(db)

    async def register_patient(self, patient_data: dict) -> Patient:
        """Register a patient; a tag can only be bound once"""
        tag_id = patient_data["tag_id"]
        if await self.patient_repo.get_by_tag(tag_id):
            raise ConflictError(
                message="Patient already exists",
                details={"tag_id": tag_id},
                error_code="PATIENT_EXISTS"
            )

        patient = await self.patient_repo.create(patient_data)
        logger.info(f"Registered patient {patient.tag_id}")
        return patient

    async def get_patient(self, tag_id: str) -> Patient:
        patient = await self.patient_repo.get_by_tag(tag_id)
        if not patient:
            raise NotFoundError(message="Patient not found", details={"tag_id": tag_id})
        return patient

    async def list_patients(self) -> List[Patient]:
        return await self.patient_repo.get_all()

    async def update_patient(self, tag_id: str, update_data: dict) -> Patient:
        """Apply a partial update; fields left out keep their value"""
        patient = await self.get_patient(tag_id)
        changes = {k: v for k, v in update_data.items() if v is not None}
        return await self.patient_repo.update(patient, changes)

    async def delete_patient(self, tag_id: str) -> None:
        # prescriptions and log entries are kept; log entries hold a name snapshot
        if not await self.patient_repo.delete(tag_id):
            raise NotFoundError(message="Patient not found", details={"tag_id": tag_id})
        logger.info(f"Deleted patient {tag_id}")

    async def resolve_name(self, tag_id: str, default: str = UNKNOWN_PATIENT) -> str:
        """Best-effort name lookup used when snapshotting log entries"""
        patient = await self.patient_repo.get_by_tag(tag_id)
        return patient.name if patient else default
