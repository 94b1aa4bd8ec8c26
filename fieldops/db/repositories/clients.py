"""
Repository for client database operations.
"""
from typing import Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.db.repositories.base import BaseRepository
from fieldops.models.client import Client
from fieldops.schemas.client import ClientCreate, ClientSummary
from fieldops.utils.ids import IDPrefix


class ClientRepository(BaseRepository[Client, ClientCreate]):
    """Client repository for database operations."""

    def __init__(self, session: AsyncSession, tenant_id: str):
        super().__init__(session=session, model=Client, tenant_id=tenant_id, id_prefix=IDPrefix.CLIENT)

    async def summaries(self) -> List[ClientSummary]:
        """Id, name and email of every client of the tenant."""
        result = await self.session.execute(self._scoped(Client.id, Client.name, Client.email))
        return [ClientSummary(id=row.id, name=row.name, email=row.email) for row in result.all()]

    async def name_index(self) -> Dict[str, str]:
        """
        Lower-cased client name -> client id.

        When two clients share a name the first one created wins.
        """
        query = self._scoped(Client.id, Client.name).order_by(Client.created_at)
        result = await self.session.execute(query)
        index: Dict[str, str] = {}
        for row in result.all():
            if row.name:
                index.setdefault(row.name.strip().lower(), row.id)
        return index
