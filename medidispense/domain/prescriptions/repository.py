from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from medidispense.domain.prescriptions.models import Prescription, PrescriptionStatus


class PrescriptionRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: dict) -> Prescription:
        prescription = Prescription(**data)
        self.db.add(prescription)
        await self.db.commit()
        await self.db.refresh(prescription)
        return prescription

    async def get_latest_pending(self, tag_id: str) -> Optional[Prescription]:
        """Latest Pending prescription for the tag; newest wins if several exist"""
        result = await self.db.execute(
            select(Prescription)
            .where(
                Prescription.tag_id == tag_id,
                Prescription.status == PrescriptionStatus.PENDING,
            )
            .order_by(Prescription.created_at.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def list_all(
        self,
        status: Optional[PrescriptionStatus] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Prescription]:
        query = select(Prescription)
        if status is not None:
            query = query.where(Prescription.status == status)
        query = query.order_by(Prescription.created_at.desc()).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def save(self, prescription: Prescription) -> Prescription:
        await self.db.commit()
        await self.db.refresh(prescription)
        return prescription
