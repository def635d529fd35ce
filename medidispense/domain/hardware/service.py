from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from medidispense.core.exceptions import NotFoundError
from medidispense.domain.medicines import quantities_of
from medidispense.domain.patients.service import PatientService
from medidispense.domain.prescriptions.repository import PrescriptionRepository
from medidispense.domain.prescriptions.service import PrescriptionService

UNKNOWN_DEVICE_PATIENT = "Unknown Patient"


class HardwareService:
    """Reads and acknowledgements coming from the dispenser device"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.prescriptions = PrescriptionService(db)
        self.prescription_repo = PrescriptionRepository(db)
        self.patients = PatientService(db)

    async def get_device_view(self, tag_id: str) -> Dict[str, Any]:
        """Pending prescription fields the device needs, plus the patient's name"""
        prescription = await self.prescription_repo.get_latest_pending(tag_id)
        if prescription is None:
            raise NotFoundError(
                message="No pending prescription found for this RFID",
                details={"tag_id": tag_id}
            )

        return {
            "tag_id": prescription.tag_id,
            "patient_name": await self.patients.resolve_name(tag_id, default=UNKNOWN_DEVICE_PATIENT),
            **quantities_of(prescription),
            "frequency": prescription.frequency,
            "duration": prescription.duration,
            "status": prescription.status,
            "created_at": prescription.created_at,
        }

    async def acknowledge_dispensed(self, tag_id: str) -> Dict[str, Any]:
        prescription = await self.prescriptions.dispense(tag_id)
        return {
            "message": "Prescription marked as dispensed",
            "tag_id": prescription.tag_id,
            "status": prescription.status,
            "last_dispensed": prescription.last_dispensed,
        }
