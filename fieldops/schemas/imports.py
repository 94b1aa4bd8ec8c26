"""
Pydantic schemas for the CSV import pipeline and its API operations.
"""
from typing import Any, Dict, List, Literal, Optional, Set
from enum import Enum
from pydantic import BaseModel, Field, field_validator


class EntityType(str, Enum):
    """Entity types that can be bulk imported."""
    CLIENTS = "clients"
    JOBS = "jobs"
    EQUIPMENT = "equipment"


class FieldDefinition(BaseModel):
    """Canonical field an uploaded column can be mapped to."""
    field: str = Field(..., description="Canonical field identifier")
    aliases: List[str] = Field(default=[], description="Header names recognized for this field")
    required: bool = Field(False, description="Whether every row must carry a value")

    class Config:
        """Pydantic config."""
        frozen = True

    @property
    def label(self) -> str:
        """Human readable title, e.g. ``zip_code`` -> ``Zip Code``."""
        return " ".join(word.capitalize() for word in self.field.split("_"))


class RawTable(BaseModel):
    """Headers and rows of a parsed CSV file, in file order."""
    headers: List[str] = Field(default=[], description="Header row in display order")
    rows: List[Dict[str, str]] = Field(default=[], description="Data rows keyed by header")
    warnings: List[str] = Field(default=[], description="Non-fatal parse notes")

    class Config:
        """Pydantic config."""
        frozen = True

    @property
    def is_empty(self) -> bool:
        """Check if the table has no data rows."""
        return not self.rows


class ValidationOutcome(BaseModel):
    """Validation result for one row."""
    row_index: int = Field(..., description="0-based index into the row sequence")
    is_valid: bool
    error_reason: Optional[str] = None


class DuplicateSet(BaseModel):
    """Rows flagged as probable duplicates of existing records."""
    indices: Set[int] = Field(default_factory=set, description="0-based indices of flagged rows")
    duplicate_count: int = 0
    is_checking: bool = False

    @classmethod
    def empty(cls, is_checking: bool = False) -> "DuplicateSet":
        return cls(indices=set(), duplicate_count=0, is_checking=is_checking)


class ImportRowError(BaseModel):
    """Schema for an individual row failure."""
    row: int = Field(..., description="1-based spreadsheet row number (header is row 1)")
    error: str = Field(..., description="Human-readable failure reason")

    class Config:
        """Pydantic config."""
        json_schema_extra = {
            "example": {
                "row": 4,
                "error": "Missing required field: name",
            }
        }


class ImportResult(BaseModel):
    """Aggregate outcome of one import run."""
    success_count: int = 0
    failed_count: int = 0
    errors: List[ImportRowError] = Field(default=[], description="Per-row failures (bounded)")
    duplicate_count: int = Field(0, description="Rows flagged as probable duplicates in preview")
    errors_truncated: bool = Field(False, description="Whether errors beyond the sample size were dropped")

    @property
    def total_rows(self) -> int:
        return self.success_count + self.failed_count

    @property
    def success_rate(self) -> float:
        """Percentage of rows imported, rounded like the result screen shows it."""
        if self.total_rows == 0:
            return 0.0
        return round((self.success_count / self.total_rows) * 100, 2)


# ============================================================================
# API request / response schemas
# ============================================================================

class ParseRequest(BaseModel):
    """Request schema for parsing raw CSV text."""
    entity_type: EntityType
    content: str = Field(..., description="Decoded CSV file contents")


class ParseResponse(BaseModel):
    """Parsed table plus the auto-detected mapping."""
    entity_type: EntityType
    table: RawTable
    mapping: Dict[str, str] = Field(..., description="Header -> canonical field")
    missing_required: List[str] = Field(default=[], description="Required fields with no mapped header")
    unmapped_headers: List[str] = Field(default=[], description="Headers that will be skipped")


class MappingUpdateRequest(BaseModel):
    """Request schema for assigning one header to a field (or skipping it)."""
    entity_type: EntityType
    headers: List[str]
    mapping: Dict[str, str] = Field(default={})
    header: str
    field: str = Field(..., description="Canonical field, or 'skip' to unmap the header")

    @field_validator("field")
    def validate_field(cls, v):
        if not v or not v.strip():
            raise ValueError("field must not be empty")
        return v.strip()


class MappingResponse(BaseModel):
    """Mapping after an operator edit."""
    mapping: Dict[str, str]
    missing_required: List[str] = Field(default=[])
    unmapped_headers: List[str] = Field(default=[])


class RowsRequest(BaseModel):
    """Rows and the confirmed mapping for preview, duplicate check or import."""
    entity_type: EntityType
    headers: List[str] = Field(default=[])
    rows: List[Dict[str, str]]
    mapping: Dict[str, str]
    apply_defaults: bool = Field(
        False,
        description="Fill the entity's documented default values before validation"
    )


class PreviewRow(BaseModel):
    """One annotated row of the preview table."""
    row_index: int
    is_valid: bool
    error_reason: Optional[str] = None
    values: Dict[str, Any] = Field(default={}, description="Normalized values keyed by canonical field")


class PreviewResponse(BaseModel):
    """Response schema for the preview step."""
    entity_type: EntityType
    total_rows: int
    valid_count: int
    invalid_count: int
    rows: List[PreviewRow] = Field(..., description="First rows of the file, annotated")
    outcomes: List[ValidationOutcome]
    mapping: Dict[str, str]


class ImportExecuteRequest(RowsRequest):
    """Request schema for running the import."""
    duplicate_count: int = Field(0, ge=0, description="Duplicate count shown in preview")


class ImportSummaryResponse(BaseModel):
    """Import result with its derived totals."""
    entity_type: EntityType
    result: ImportResult
    total_rows: int
    success_rate: float
    final_status: Literal["success", "partial_success", "failed", "empty"]
