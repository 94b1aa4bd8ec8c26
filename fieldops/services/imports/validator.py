"""
Row validation against the confirmed column mapping.
"""
from typing import List, Mapping, Optional, Sequence

from fieldops.schemas.imports import ValidationOutcome
from fieldops.services.imports.mapping import column_for


def validate_row(
    row: Mapping[str, str],
    mapping: Mapping[str, str],
    required_fields: Sequence[str],
) -> Optional[str]:
    """
    Check a row for its required fields.

    Args:
        row: Raw row keyed by header
        mapping: Header -> canonical field
        required_fields: Required fields in definition order

    Returns:
        Optional[str]: Reason naming the first missing field, or None when valid
    """
    for field in required_fields:
        header = column_for(mapping, field)
        if header is None or not (row.get(header) or "").strip():
            return f"Missing required field: {field}"
    return None


def validate_rows(
    rows: Sequence[Mapping[str, str]],
    mapping: Mapping[str, str],
    required_fields: Sequence[str],
) -> List[ValidationOutcome]:
    outcomes = []
    for index, row in enumerate(rows):
        reason = validate_row(row, mapping, required_fields)
        outcomes.append(ValidationOutcome(row_index=index, is_valid=reason is None, error_reason=reason))
    return outcomes
