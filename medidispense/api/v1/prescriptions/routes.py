from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from medidispense.core.exceptions import PrescriptionErrorResponse, ErrorResponse
from medidispense.domain.prescriptions.models import PrescriptionStatus
from medidispense.domain.prescriptions.service import PrescriptionService
from medidispense.api.v1.prescriptions.schemas import (
    PrescriptionCreate,
    PrescriptionStatusUpdate,
    PrescriptionResponse,
    PrescriptionCreatedResponse,
)
from medidispense.infrastructure.database import get_db

router = APIRouter(prefix="/prescriptions", tags=["Prescriptions"])


@router.post(
    "",
    response_model=PrescriptionCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": PrescriptionErrorResponse}},
)
async def create_prescription(prescription_in: PrescriptionCreate, db: AsyncSession = Depends(get_db)):
    """
    Create a Pending prescription and debit the dispenser stock.

    Rejected with 400 and the full list of errors and alerts when the patient
    already has a pending prescription or any medicine can't be covered.
    """
    data = prescription_in.model_dump(exclude={"tag_id"})
    prescription, alerts = await PrescriptionService(db).create_prescription(prescription_in.tag_id, data)
    return PrescriptionCreatedResponse(
        prescription=PrescriptionResponse.model_validate(prescription),
        alerts=alerts,
    )


@router.get("", response_model=List[PrescriptionResponse])
async def list_prescriptions(
    status: Optional[PrescriptionStatus] = None,
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    prescriptions = await PrescriptionService(db).list_prescriptions(status=status, skip=skip, limit=limit)
    return [PrescriptionResponse.model_validate(p) for p in prescriptions]


@router.get("/{tag_id}", response_model=PrescriptionResponse, responses={404: {"model": ErrorResponse}})
async def get_pending_prescription(tag_id: str, db: AsyncSession = Depends(get_db)):
    prescription = await PrescriptionService(db).get_pending(tag_id)
    return PrescriptionResponse.model_validate(prescription)


@router.post("/{tag_id}/dispense", response_model=PrescriptionResponse, responses={404: {"model": ErrorResponse}})
async def dispense_prescription(tag_id: str, db: AsyncSession = Depends(get_db)):
    prescription = await PrescriptionService(db).dispense(tag_id)
    return PrescriptionResponse.model_validate(prescription)


@router.put("/{tag_id}/status", response_model=PrescriptionResponse, responses={404: {"model": ErrorResponse}})
async def update_prescription_status(
    tag_id: str,
    status_in: PrescriptionStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    prescription = await PrescriptionService(db).set_status(tag_id, status_in.status)
    return PrescriptionResponse.model_validate(prescription)
