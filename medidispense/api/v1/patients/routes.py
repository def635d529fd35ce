from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from medidispense.domain.patients.service import PatientService
from medidispense.api.v1.patients.schemas import (
    PatientCreate,
    PatientUpdate,
    PatientResponse,
    MessageResponse,
)
from medidispense.infrastructure.database import get_db

router = APIRouter(prefix="/patients", tags=["Patients"])


@router.get("", response_model=List[PatientResponse])
async def list_patients(db: AsyncSession = Depends(get_db)):
    """List registered patients, newest first"""
    patients = await PatientService(db).list_patients()
    return [PatientResponse.model_validate(p) for p in patients]


@router.post("", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def register_patient(patient_in: PatientCreate, db: AsyncSession = Depends(get_db)):
    patient = await PatientService(db).register_patient(patient_in.model_dump())
    return PatientResponse.model_validate(patient)


@router.get("/{tag_id}", response_model=PatientResponse)
async def get_patient(tag_id: str, db: AsyncSession = Depends(get_db)):
    patient = await PatientService(db).get_patient(tag_id)
    return PatientResponse.model_validate(patient)


@router.put("/{tag_id}", response_model=PatientResponse)
async def update_patient(tag_id: str, patient_in: PatientUpdate, db: AsyncSession = Depends(get_db)):
    patient = await PatientService(db).update_patient(tag_id, patient_in.model_dump(exclude_unset=True))
    return PatientResponse.model_validate(patient)


@router.delete("/{tag_id}", response_model=MessageResponse)
async def delete_patient(tag_id: str, db: AsyncSession = Depends(get_db)):
    await PatientService(db).delete_patient(tag_id)
    return MessageResponse(message="Patient removed")
