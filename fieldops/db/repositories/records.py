"""
Tenant record store used by the import pipeline.
"""
import logging
from typing import Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.db.repositories.clients import ClientRepository
from fieldops.db.repositories.equipment import EquipmentRepository
from fieldops.db.repositories.jobs import JobRepository
from fieldops.schemas.client import ClientCreate, ClientSummary
from fieldops.schemas.equipment import EquipmentCreate
from fieldops.schemas.job import JobCreate, JobSummary

logger = logging.getLogger("fieldops.db.records")


class TenantRecordStore:
    """
    Persistence and lookup for one tenant.

    Inserts commit immediately, one row per call, and raise PersistenceError
    after rolling back when the database rejects the row.
    """

    def __init__(self, session: AsyncSession, tenant_id: str):
        self.session = session
        self.tenant_id = tenant_id
        self.clients = ClientRepository(session, tenant_id)
        self.jobs = JobRepository(session, tenant_id)
        self.equipment = EquipmentRepository(session, tenant_id)

    async def insert_client(self, record: ClientCreate) -> str:
        client = await self.clients.create(obj_in=record)
        logger.debug(f"Created client {client.id} for tenant {self.tenant_id}")
        return client.id

    async def insert_job(self, record: JobCreate) -> str:
        job = await self.jobs.create(obj_in=record)
        return job.id

    async def insert_equipment(self, record: EquipmentCreate) -> str:
        equipment = await self.equipment.create(obj_in=record)
        return equipment.id

    async def client_index(self) -> Dict[str, str]:
        """Lower-cased client name -> client id."""
        return await self.clients.name_index()

    async def existing_clients(self) -> List[ClientSummary]:
        return await self.clients.summaries()

    async def existing_jobs(self) -> List[JobSummary]:
        return await self.jobs.summaries()

    async def existing_serials(self) -> List[str]:
        return await self.equipment.serial_numbers()
