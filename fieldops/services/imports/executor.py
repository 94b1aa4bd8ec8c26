# fieldops/services/imports/executor.py
"""
Import executor - persists mapped rows one at a time.

Rows are committed sequentially in file order. A row that fails validation
or persistence is recorded and the run moves on; the caller always gets an
ImportResult back, there is no whole-batch failure.
"""
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Mapping, Optional, Sequence

from fieldops.core.config import settings
from fieldops.core.exceptions import PersistenceError
from fieldops.schemas.client import ClientCreate
from fieldops.schemas.imports import EntityType, ImportResult, ImportRowError
from fieldops.services.imports.entities import ClientIndex, ImportableEntity, get_entity
from fieldops.services.imports.events import (
    ImportErrorV1, ImportEvent,
    create_completion_event, create_progress_event,
)
from fieldops.services.imports.validator import validate_row
from fieldops.utils.datetime import utc_now
from fieldops.utils.ids import IDPrefix, generate_prefixed_id

logger = logging.getLogger("fieldops.imports.executor")

ProgressCallback = Callable[[ImportEvent], Awaitable[None]]

# Recent errors carried on each progress event
PROGRESS_ERROR_SAMPLE = 10


def spreadsheet_row(index: int) -> int:
    """Row number as the operator sees it: header is row 1, first data row is 2."""
    return index + 2


@dataclass
class RunState:
    """Counters for one import run."""
    total_rows: int
    error_limit: int
    success_count: int = 0
    failed_count: int = 0
    errors: List[ImportRowError] = field(default_factory=list)
    errors_truncated: bool = False

    @property
    def processed(self) -> int:
        return self.success_count + self.failed_count

    def record_success(self) -> None:
        self.success_count += 1

    def record_failure(self, index: int, reason: str) -> None:
        self.failed_count += 1
        if len(self.errors) < self.error_limit:
            self.errors.append(ImportRowError(row=spreadsheet_row(index), error=reason))
        else:
            self.errors_truncated = True

    def error_sample(self, limit: Optional[int] = None) -> List[ImportErrorV1]:
        errors = self.errors if limit is None else self.errors[-limit:]
        return [ImportErrorV1(row=e.row, error=e.error) for e in errors]


class ImportExecutor:
    """
    Runs one import for one tenant.

    The store is a tenant-scoped record store; the notifier (optional) is told
    about every client created with an email so a portal invite can go out.
    """

    def __init__(
        self,
        store,
        notifier=None,
        progress_callback: Optional[ProgressCallback] = None,
        error_sample_size: Optional[int] = None,
        progress_every: Optional[int] = None,
    ):
        self.store = store
        self.notifier = notifier
        self.progress_callback = progress_callback
        self.error_sample_size = error_sample_size or settings.IMPORT_ERROR_SAMPLE_SIZE
        self.progress_every = max(1, progress_every or settings.IMPORT_PROGRESS_EVERY)

    async def run(
        self,
        entity_type: EntityType,
        rows: Sequence[Mapping[str, str]],
        mapping: Mapping[str, str],
        duplicate_count: int = 0,
    ) -> ImportResult:
        """
        Import rows of one entity type.

        Args:
            entity_type: Entity being imported
            rows: Raw rows keyed by header, in file order
            mapping: Confirmed column mapping
            duplicate_count: Duplicates flagged during preview, reported back as-is

        Returns:
            ImportResult: Counts and (bounded) per-row errors
        """
        entity = get_entity(entity_type)
        import_id = generate_prefixed_id(IDPrefix.IMPORT)
        started_at = utc_now()
        state = RunState(total_rows=len(rows), error_limit=self.error_sample_size)

        logger.info(f"Import {import_id} started: {len(rows)} {entity.noun}")

        client_index = await self._load_client_index(entity)
        required = entity.required_fields

        for index, row in enumerate(rows):
            await self._import_row(entity, index, row, mapping, required, client_index, state)

            if state.processed % self.progress_every == 0 and state.processed < state.total_rows:
                await self._emit_progress(import_id, entity, state)

        if state.total_rows:
            await self._emit_progress(import_id, entity, state)

        result = ImportResult(
            success_count=state.success_count,
            failed_count=state.failed_count,
            errors=state.errors,
            duplicate_count=duplicate_count,
            errors_truncated=state.errors_truncated,
        )

        await self._emit_completion(import_id, entity, state, duplicate_count, started_at)

        logger.info(
            f"Import {import_id} finished: {state.success_count} {entity.noun} imported, "
            f"{state.failed_count} failed"
        )
        return result

    async def _load_client_index(self, entity: ImportableEntity) -> Optional[ClientIndex]:
        if not entity.uses_client_index:
            return None
        try:
            return await self.store.client_index()
        except Exception as e:
            logger.error(f"Could not load clients for name matching, continuing without: {str(e)}")
            return None

    async def _import_row(
        self,
        entity: ImportableEntity,
        index: int,
        row: Mapping[str, str],
        mapping: Mapping[str, str],
        required: List[str],
        client_index: Optional[ClientIndex],
        state: RunState,
    ) -> None:
        reason = validate_row(row, mapping, required)
        if reason:
            state.record_failure(index, reason)
            return

        try:
            record = entity.build_record(entity.values(row, mapping), client_index)
            record_id = await entity.persist(self.store, record)
        except PersistenceError as e:
            logger.warning(f"Row {spreadsheet_row(index)} failed to import: {e.message}")
            state.record_failure(index, e.message)
            return
        except Exception as e:
            logger.error(f"Unexpected error importing row {spreadsheet_row(index)}: {str(e)}", exc_info=True)
            state.record_failure(index, f"Unexpected error: {str(e)}")
            return

        state.record_success()

        if isinstance(record, ClientCreate) and record.email:
            await self._notify_client(record_id, record)

    async def _notify_client(self, client_id: str, record: ClientCreate) -> None:
        if self.notifier is None:
            return
        try:
            await self.notifier.client_imported(client_id, record)
        except Exception as e:
            logger.warning(f"Portal invite for client {client_id} failed: {str(e)}")

    async def _emit_progress(self, import_id: str, entity: ImportableEntity, state: RunState) -> None:
        if not self.progress_callback:
            return
        event = create_progress_event(
            import_id=import_id,
            entity_type=entity.entity_type.value,
            processed=state.processed,
            successful=state.success_count,
            failed=state.failed_count,
            total_rows=state.total_rows,
            errors=state.error_sample(PROGRESS_ERROR_SAMPLE),
            error_count=state.failed_count,
        )
        try:
            await self.progress_callback(event)
        except Exception as e:
            logger.warning(f"Progress callback failed for import {import_id}: {str(e)}")

    async def _emit_completion(
        self,
        import_id: str,
        entity: ImportableEntity,
        state: RunState,
        duplicate_count: int,
        started_at,
    ) -> None:
        if not self.progress_callback:
            return
        event = create_completion_event(
            import_id=import_id,
            entity_type=entity.entity_type.value,
            successful=state.success_count,
            failed=state.failed_count,
            duplicate_count=duplicate_count,
            error_summary=state.error_sample(),
            errors_truncated=state.errors_truncated,
            started_at=started_at,
            completed_at=utc_now(),
        )
        try:
            await self.progress_callback(event)
        except Exception as e:
            logger.warning(f"Progress callback failed on completion for import {import_id}: {str(e)}")
