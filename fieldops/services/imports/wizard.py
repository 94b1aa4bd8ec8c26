"""
Import wizard session state.

The wizard walks upload -> mapping -> preview -> import. Its state is an
immutable value; every step returns a new ImportWizard, so a host can keep
the previous step around (e.g. for "back") and nothing is shared between
sessions.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from fieldops.core.config import settings
from fieldops.core.exceptions import MappingIncompleteError
from fieldops.schemas.imports import (
    EntityType, ImportResult, PreviewRow, RawTable, ValidationOutcome,
)
from fieldops.services.imports import mapping as mapping_engine
from fieldops.services.imports.entities import ImportableEntity, get_entity
from fieldops.services.imports.executor import ImportExecutor
from fieldops.services.imports.mapping import ColumnMapping
from fieldops.services.imports.parser import parse
from fieldops.services.imports.validator import validate_rows

logger = logging.getLogger("fieldops.imports.wizard")


@dataclass(frozen=True)
class ImportWizard:
    """One operator's pass through the import wizard."""
    entity_type: EntityType
    table: RawTable = field(default_factory=RawTable)
    mapping: ColumnMapping = field(default_factory=ColumnMapping)
    step: str = "upload"
    outcomes: Tuple[ValidationOutcome, ...] = ()

    @property
    def entity(self) -> ImportableEntity:
        return get_entity(self.entity_type)

    @property
    def missing_required(self) -> List[str]:
        return mapping_engine.missing_required(self.mapping, self.entity.fields)

    @property
    def unmapped_headers(self) -> List[str]:
        return mapping_engine.unmapped_headers(self.table.headers, self.mapping)

    @property
    def valid_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.is_valid)

    @property
    def invalid_count(self) -> int:
        return len(self.outcomes) - self.valid_count

    @classmethod
    def start(cls, entity_type: EntityType) -> "ImportWizard":
        return cls(entity_type=EntityType(entity_type))

    def load(self, text: str) -> "ImportWizard":
        """Parse uploaded text and auto-detect the mapping."""
        table = parse(text)
        if table.is_empty:
            logger.info(f"Uploaded {self.entity_type.value} file has no data rows")
            return replace(self, table=table, mapping=ColumnMapping(), step="upload", outcomes=())

        detected = mapping_engine.auto_detect(table.headers, self.entity.fields)
        return replace(self, table=table, mapping=detected, step="mapping", outcomes=())

    def remap(self, header: str, field_name: Optional[str]) -> "ImportWizard":
        """Operator edit of one column; invalidates any earlier preview."""
        updated = mapping_engine.set_mapping(self.mapping, header, field_name)
        return replace(self, mapping=updated, step="mapping", outcomes=())

    def with_defaults(self) -> "ImportWizard":
        """Fill this entity's default values (e.g. equipment type)."""
        defaults = self.entity.defaults
        if not defaults or not self.table.headers:
            return self
        table, updated = mapping_engine.apply_defaults(self.table, self.mapping, defaults, self.entity.fields)
        return replace(self, table=table, mapping=updated, outcomes=())

    def confirm_mapping(self) -> "ImportWizard":
        """
        Move to preview.

        Raises:
            MappingIncompleteError: If a required field has no column
        """
        missing = self.missing_required
        if missing:
            raise MappingIncompleteError(missing)

        outcomes = validate_rows(self.table.rows, self.mapping, self.entity.required_fields)
        return replace(self, step="preview", outcomes=tuple(outcomes))

    def preview(self, limit: Optional[int] = None) -> List[PreviewRow]:
        """First rows annotated with their validation outcome and normalized values."""
        limit = settings.IMPORT_PREVIEW_ROWS if limit is None else limit
        outcomes = self.outcomes or tuple(
            validate_rows(self.table.rows, self.mapping, self.entity.required_fields)
        )
        preview_rows = []
        for outcome in outcomes[:limit]:
            values = self.entity.values(self.table.rows[outcome.row_index], self.mapping)
            preview_rows.append(PreviewRow(
                row_index=outcome.row_index,
                is_valid=outcome.is_valid,
                error_reason=outcome.error_reason,
                values=self.entity.preview(values),
            ))
        return preview_rows

    async def run(self, executor: ImportExecutor, duplicate_count: int = 0) -> Tuple["ImportWizard", ImportResult]:
        """Import the confirmed rows; returns the finished wizard and the result."""
        confirmed = self if self.step == "preview" else self.confirm_mapping()
        result = await executor.run(self.entity_type, confirmed.table.rows, confirmed.mapping, duplicate_count)
        return replace(confirmed, step="complete"), result
