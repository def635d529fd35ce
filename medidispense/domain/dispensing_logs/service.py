from dataclasses import dataclass
from typing import Dict, List, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from medidispense.domain.dispensing_logs.models import DispensingLog, DispenseOutcome
from medidispense.domain.dispensing_logs.repository import DispensingLogRepository
from medidispense.domain.patients.service import PatientService

logger = logging.getLogger(__name__)

NO_ACTIVE_PRESCRIPTION = "No active prescription found"


@dataclass
class LogWriteResult:
    """Outcome of a best-effort audit append"""
    entry: Optional[DispensingLog] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class DispensingLogService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = DispensingLogRepository(db)
        self.patients = PatientService(db)

    async def append(
        self,
        tag_id: str,
        status: DispenseOutcome,
        medicines: Optional[Dict[str, int]] = None,
        error_message: Optional[str] = None,
        patient_name: Optional[str] = None,
    ) -> DispensingLog:
        """Append an entry; store errors propagate"""
        if not patient_name:
            patient_name = await self.patients.resolve_name(tag_id)

        return await self.repo.create({
            "tag_id": tag_id,
            "patient_name": patient_name,
            "medicines": medicines,
            "status": status,
            "error_message": error_message,
        })

    async def try_append(self, tag_id: str, status: DispenseOutcome, **kwargs) -> LogWriteResult:
        """
        Append an entry without ever raising a store error.

        The session is rolled back on failure, which expires every object it
        holds; callers that keep using loaded objects must refresh them.
        """
        try:
            entry = await self.append(tag_id, status, **kwargs)
        except SQLAlchemyError as e:
            await self.db.rollback()
            return LogWriteResult(error=str(e))
        return LogWriteResult(entry=entry)

    async def record_device_report(self, report: dict) -> DispensingLog:
        """Entry posted by the device itself, typically a failed attempt"""
        entry = await self.append(
            tag_id=report["tag_id"],
            status=report["status"],
            medicines=report.get("medicines"),
            error_message=report.get("error_message"),
            patient_name=report.get("patient_name"),
        )
        if entry.status == DispenseOutcome.FAILURE:
            logger.info(f"Device reported failure for {entry.tag_id}: {entry.error_message}")
        return entry

    async def list_logs(self, skip: int = 0, limit: Optional[int] = None) -> List[DispensingLog]:
        return await self.repo.list_recent(skip=skip, limit=limit)
