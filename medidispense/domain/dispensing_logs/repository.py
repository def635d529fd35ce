from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from medidispense.domain.dispensing_logs.models import DispensingLog


class DispensingLogRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, log_data: dict) -> DispensingLog:
        entry = DispensingLog(**log_data)
        self.db.add(entry)
        await self.db.commit()
        await self.db.refresh(entry)
        return entry

    async def list_recent(self, skip: int = 0, limit: Optional[int] = None) -> List[DispensingLog]:
        """Newest first; every entry unless a page is asked for"""
        query = select(DispensingLog).order_by(DispensingLog.created_at.desc()).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())
