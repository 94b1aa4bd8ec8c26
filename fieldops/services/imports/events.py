# fieldops/services/imports/events.py
"""
Import progress event schemas.

Versioned, typed payloads emitted by the import executor while it works
through a file, so a host can drive a progress bar or a live result screen.
"""
from typing import List, TypedDict, Union
from enum import Enum
from datetime import datetime

__all__ = [
    "ImportProgressV1", "ImportEventType", "ImportErrorV1", "ImportCompletedV1",
    "create_progress_event", "create_completion_event", "final_status_for",
]


class ImportEventType(str, Enum):
    """Import event types for progress tracking."""
    PROGRESS = "progress"      # Incremental progress updates
    COMPLETED = "completed"    # Final state


class ImportErrorV1(TypedDict):
    """Row failure, same shape as ImportRowError."""
    row: int                           # Spreadsheet row number (header is row 1)
    error: str                         # Human-readable reason


class ImportProgressV1(TypedDict):
    """
    Progress payload emitted every few rows and once at the end.

    All counts are cumulative.
    """
    type: ImportEventType              # Always "progress"
    import_id: str
    entity_type: str

    processed: int                     # Rows handled so far
    successful: int                    # Rows persisted so far
    failed: int                        # Rows rejected or failed to persist
    total_rows: int
    percent: float                     # 0.00-100.00

    errors: List[ImportErrorV1]        # Most recent errors (sampled)
    error_count: int                   # Exact error count


class ImportCompletedV1(TypedDict):
    """Final event of an import run."""
    type: ImportEventType              # Always "completed"
    import_id: str
    entity_type: str

    total_rows: int
    successful: int
    failed: int
    duplicate_count: int               # Advisory, from the preview
    final_status: str                  # "success", "partial_success", "failed" or "empty"
    success_rate: float                # 0.00-100.00

    error_summary: List[ImportErrorV1]
    errors_truncated: bool

    total_processing_time: float       # Seconds
    started_at: str
    completed_at: str


ImportEvent = Union[ImportProgressV1, ImportCompletedV1]


def final_status_for(successful: int, failed: int) -> str:
    """Overall outcome label for a finished run."""
    if successful == 0 and failed == 0:
        return "empty"
    if failed == 0:
        return "success"
    if successful > 0:
        return "partial_success"
    return "failed"


def create_progress_event(
    import_id: str,
    entity_type: str,
    processed: int,
    successful: int,
    failed: int,
    total_rows: int,
    errors: List[ImportErrorV1],
    error_count: int,
) -> ImportProgressV1:
    """
    Create a progress event with its percentage computed.

    Args:
        import_id: Import run identifier
        entity_type: Entity being imported
        processed: Rows processed
        successful: Rows persisted
        failed: Rows failed
        total_rows: Rows in the file
        errors: Recent error samples
        error_count: Total error count

    Returns:
        ImportProgressV1: Progress event
    """
    if total_rows <= 0:
        percent = 0.0
    else:
        percent = round((processed / total_rows) * 100, 2)
        percent = max(0.0, min(100.0, percent))

    return ImportProgressV1(
        type=ImportEventType.PROGRESS,
        import_id=import_id,
        entity_type=entity_type,
        processed=processed,
        successful=successful,
        failed=failed,
        total_rows=total_rows,
        percent=percent,
        errors=errors,
        error_count=error_count,
    )


def create_completion_event(
    import_id: str,
    entity_type: str,
    successful: int,
    failed: int,
    duplicate_count: int,
    error_summary: List[ImportErrorV1],
    errors_truncated: bool,
    started_at: datetime,
    completed_at: datetime,
) -> ImportCompletedV1:
    """Create the completion event with its derived metrics."""
    total_rows = successful + failed
    success_rate = round(successful / total_rows * 100, 2) if total_rows > 0 else 0.0

    return ImportCompletedV1(
        type=ImportEventType.COMPLETED,
        import_id=import_id,
        entity_type=entity_type,
        total_rows=total_rows,
        successful=successful,
        failed=failed,
        duplicate_count=duplicate_count,
        final_status=final_status_for(successful, failed),
        success_rate=success_rate,
        error_summary=error_summary,
        errors_truncated=errors_truncated,
        total_processing_time=round((completed_at - started_at).total_seconds(), 3),
        started_at=started_at.isoformat(),
        completed_at=completed_at.isoformat(),
    )
