from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from medidispense.domain.hardware.service import HardwareService
from medidispense.api.v1.hardware.schemas import DevicePrescription, DispenseAcknowledgement
from medidispense.infrastructure.database import get_db

router = APIRouter(prefix="/hardware", tags=["Hardware"])


@router.get("/{tag_id}", response_model=DevicePrescription)
async def get_prescription_for_device(tag_id: str, db: AsyncSession = Depends(get_db)):
    return DevicePrescription(**await HardwareService(db).get_device_view(tag_id))


@router.put("/dispensed/{tag_id}", response_model=DispenseAcknowledgement)
async def acknowledge_dispensed(tag_id: str, db: AsyncSession = Depends(get_db)):
    return DispenseAcknowledgement(**await HardwareService(db).acknowledge_dispensed(tag_id))
