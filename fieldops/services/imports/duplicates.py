"""
Duplicate detection against a tenant's existing records.

Detection is advisory: flagged rows are reported to the operator but are
still imported. A failed lookup degrades to "no duplicates found".
"""
import asyncio
import logging
from typing import Mapping, Optional, Sequence

from fieldops.schemas.imports import DuplicateSet, EntityType
from fieldops.services.imports.entities import get_entity

logger = logging.getLogger("fieldops.imports.duplicates")


class DuplicateCheck:
    """Handle on a running duplicate check."""

    def __init__(self, task: "asyncio.Task[DuplicateSet]"):
        self._task = task

    @property
    def done(self) -> bool:
        return self._task.done()

    def snapshot(self) -> DuplicateSet:
        """Current state: empty and checking until the task finishes."""
        if not self._task.done():
            return DuplicateSet.empty(is_checking=True)
        if self._task.cancelled():
            return DuplicateSet.empty()
        return self._task.result()

    async def wait(self) -> DuplicateSet:
        try:
            return await self._task
        except asyncio.CancelledError:
            return DuplicateSet.empty()

    def cancel(self) -> None:
        self._task.cancel()


class DuplicateDetector:
    """
    Flags rows that probably already exist for the tenant.

    Keys per entity type: clients by name or email, jobs by title and
    scheduled date, equipment by serial number. All comparisons are
    case-insensitive.
    """

    def __init__(self, store):
        """
        Initialize the detector.

        Args:
            store: Tenant-scoped record store used for lookups
        """
        self.store = store

    async def detect(
        self,
        entity_type: EntityType,
        rows: Sequence[Mapping[str, str]],
        mapping: Mapping[str, str],
    ) -> DuplicateSet:
        """
        Find rows matching existing records.

        Args:
            entity_type: Entity being imported
            rows: Raw rows keyed by header
            mapping: Confirmed column mapping

        Returns:
            DuplicateSet: Flagged row indices (0-based) and their count
        """
        if not rows:
            return DuplicateSet.empty()

        entity = get_entity(entity_type)

        try:
            existing = await entity.existing_keys(self.store)
        except Exception as e:
            logger.error(f"Duplicate lookup failed for {entity.noun}: {str(e)}")
            return DuplicateSet.empty()

        if not existing:
            return DuplicateSet.empty()

        indices = set()
        for index, row in enumerate(rows):
            keys = entity.duplicate_keys(entity.values(row, mapping))
            if keys & existing:
                indices.add(index)

        if indices:
            logger.info(f"Flagged {len(indices)} probable duplicate {entity.noun}")
        return DuplicateSet(indices=indices, duplicate_count=len(indices), is_checking=False)

    def start(
        self,
        entity_type: EntityType,
        rows: Sequence[Mapping[str, str]],
        mapping: Mapping[str, str],
        name: Optional[str] = None,
    ) -> DuplicateCheck:
        """Run ``detect`` in the background; must be called inside a running loop."""
        task = asyncio.create_task(
            self.detect(entity_type, list(rows), dict(mapping)),
            name=name or f"duplicate-check-{EntityType(entity_type).value}",
        )
        return DuplicateCheck(task)
