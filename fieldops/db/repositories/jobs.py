"""
Repository for job database operations.
"""
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.db.repositories.base import BaseRepository
from fieldops.models.job import Job
from fieldops.schemas.job import JobCreate, JobSummary
from fieldops.utils.ids import IDPrefix


class JobRepository(BaseRepository[Job, JobCreate]):
    """Job repository for database operations."""

    def __init__(self, session: AsyncSession, tenant_id: str):
        super().__init__(session=session, model=Job, tenant_id=tenant_id, id_prefix=IDPrefix.JOB)

    async def summaries(self) -> List[JobSummary]:
        result = await self.session.execute(self._scoped(Job.id, Job.title, Job.scheduled_date))
        return [
            JobSummary(id=row.id, title=row.title, scheduled_date=row.scheduled_date)
            for row in result.all()
        ]
