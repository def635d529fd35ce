from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from medidispense.domain.dispensing_logs.service import DispensingLogService
from medidispense.api.v1.dispensing_logs.schemas import DispensingLogCreate, DispensingLogResponse
from medidispense.infrastructure.database import get_db

router = APIRouter(prefix="/logs", tags=["Dispensing Logs"])


@router.get("", response_model=List[DispensingLogResponse])
async def list_logs(
    db: AsyncSession = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
):
    """Audit trail, newest first; the whole trail unless limit is given"""
    logs = await DispensingLogService(db).list_logs(skip=skip, limit=limit)
    return [DispensingLogResponse.model_validate(entry) for entry in logs]


@router.post("", response_model=DispensingLogResponse, status_code=status.HTTP_201_CREATED)
async def create_log(log_in: DispensingLogCreate, db: AsyncSession = Depends(get_db)):
    """Record an attempt reported directly by the device"""
    entry = await DispensingLogService(db).record_device_report(log_in.model_dump())
    return DispensingLogResponse.model_validate(entry)
