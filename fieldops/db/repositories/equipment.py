"""
Repository for equipment database operations.
"""
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.db.repositories.base import BaseRepository
from fieldops.models.equipment import Equipment
from fieldops.schemas.equipment import EquipmentCreate
from fieldops.utils.ids import IDPrefix


class EquipmentRepository(BaseRepository[Equipment, EquipmentCreate]):
    """Equipment repository for database operations."""

    def __init__(self, session: AsyncSession, tenant_id: str):
        super().__init__(session=session, model=Equipment, tenant_id=tenant_id, id_prefix=IDPrefix.EQUIPMENT)

    async def serial_numbers(self) -> List[str]:
        """Non-empty serial numbers registered for the tenant."""
        query = self._scoped(Equipment.serial_number).where(Equipment.serial_number.isnot(None))
        result = await self.session.execute(query)
        return [serial for serial in result.scalars().all() if serial]
