"""
Column mapping between uploaded headers and canonical import fields.

A ColumnMapping is an immutable value: every edit returns a new mapping, so
each wizard step can hold on to the exact mapping it validated against.
"""
import logging
import re
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from fieldops.schemas.imports import FieldDefinition, RawTable

logger = logging.getLogger("fieldops.imports.mapping")

SKIP = "skip"

_NON_ALNUM_RGX = re.compile(r"[^a-z0-9]")
_UNDERSCORES_RGX = re.compile(r"_+")


class ColumnMapping(Mapping[str, str]):
    """
    Read-only mapping of raw header -> canonical field.

    No two headers map to the same field; the constructor rejects input that
    breaks this.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Optional[Mapping[str, str]] = None):
        items = dict(data or {})
        fields = list(items.values())
        if len(fields) != len(set(fields)):
            duplicated = sorted({f for f in fields if fields.count(f) > 1})
            raise ValueError(f"Fields mapped more than once: {', '.join(duplicated)}")
        self._data: Dict[str, str] = items

    def __getitem__(self, header: str) -> str:
        return self._data[header]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other) -> bool:
        if isinstance(other, Mapping):
            return dict(self._data) == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._data.items()))

    def __repr__(self) -> str:
        return f"ColumnMapping({self._data!r})"

    def to_dict(self) -> Dict[str, str]:
        return dict(self._data)


def normalize_column_name(name: str) -> str:
    """
    Normalize a header for matching.

    ``" Zip-Code "`` -> ``"zip_code"``
    """
    normalized = _NON_ALNUM_RGX.sub("_", (name or "").strip().lower())
    normalized = _UNDERSCORES_RGX.sub("_", normalized)
    return normalized.strip("_")


def _candidate_names(definition: FieldDefinition) -> List[str]:
    names = [normalize_column_name(definition.field)]
    names.extend(normalize_column_name(alias) for alias in definition.aliases)
    return [name for name in names if name]


def _contains_tokens(header: str, name: str) -> bool:
    """Whether ``name`` appears as a whole-token run inside ``header``."""
    header_tokens = header.split("_")
    name_tokens = name.split("_")
    size = len(name_tokens)
    return any(
        header_tokens[start:start + size] == name_tokens
        for start in range(len(header_tokens) - size + 1)
    )


def auto_detect(headers: Sequence[str], field_definitions: Iterable[FieldDefinition]) -> ColumnMapping:
    """
    Guess the mapping from header names.

    Every header is first matched exactly against field names and aliases;
    headers still unmatched are then tried with a whole-token substring match
    (``customer_full_name`` contains ``full_name``). Fields are tried in
    definition order and a field already taken is never assigned again.

    Args:
        headers: Header row of the uploaded file
        field_definitions: Fields of the entity being imported

    Returns:
        ColumnMapping: Detected mapping; unmatched headers are left out
    """
    definitions = list(field_definitions)
    candidates = [(definition.field, _candidate_names(definition)) for definition in definitions]
    normalized_headers = [(header, normalize_column_name(header)) for header in headers]

    detected: Dict[str, str] = {}
    claimed = set()

    # Pass 1: exact matches
    for header, normalized in normalized_headers:
        if not normalized or header in detected:
            continue
        for field, names in candidates:
            if field not in claimed and normalized in names:
                detected[header] = field
                claimed.add(field)
                break

    # Pass 2: substring matches for what is left
    for header, normalized in normalized_headers:
        if not normalized or header in detected:
            continue
        for field, names in candidates:
            if field in claimed:
                continue
            if any(_contains_tokens(normalized, name) for name in names):
                detected[header] = field
                claimed.add(field)
                break

    # Keep header order so the mapping reads like the file
    ordered = {header: detected[header] for header, _ in normalized_headers if header in detected}
    logger.debug(f"Auto-detected {len(ordered)} of {len(headers)} columns")
    return ColumnMapping(ordered)


def set_mapping(current: Mapping[str, str], header: str, field: Optional[str]) -> ColumnMapping:
    """
    Assign ``header`` to ``field``, or unmap it when ``field`` is ``"skip"``.

    If another header already holds ``field`` it becomes unmapped: the last
    assignment wins.
    """
    updated = dict(current)

    if field is None or field == SKIP:
        updated.pop(header, None)
        return ColumnMapping(updated)

    for other_header, other_field in list(updated.items()):
        if other_field == field and other_header != header:
            logger.info(f"Column '{other_header}' unmapped: '{field}' reassigned to '{header}'")
            del updated[other_header]

    updated[header] = field
    return ColumnMapping(updated)


def column_for(mapping: Mapping[str, str], field: str) -> Optional[str]:
    """Header currently mapped to ``field``, if any."""
    for header, mapped_field in mapping.items():
        if mapped_field == field:
            return header
    return None


def missing_required(mapping: Mapping[str, str], field_definitions: Iterable[FieldDefinition]) -> List[str]:
    """Required fields with no mapped header, in definition order."""
    mapped = set(mapping.values())
    return [
        definition.field
        for definition in field_definitions
        if definition.required and definition.field not in mapped
    ]


def unmapped_headers(headers: Sequence[str], mapping: Mapping[str, str]) -> List[str]:
    return [header for header in headers if header not in mapping]


def apply_defaults(
    table: RawTable,
    mapping: Mapping[str, str],
    defaults: Mapping[str, str],
    field_definitions: Iterable[FieldDefinition] = (),
) -> Tuple[RawTable, ColumnMapping]:
    """
    Fill default values for fields before validation.

    A mapped field gets the default in every blank cell of its column. An
    unmapped field gets a new ``"<Label> (default)"`` column holding the
    default for every row.

    Returns:
        Tuple[RawTable, ColumnMapping]: New table and mapping; inputs are untouched
    """
    labels = {definition.field: definition.label for definition in field_definitions}
    headers = list(table.headers)
    rows = [dict(row) for row in table.rows]
    new_mapping = dict(mapping)

    for field, value in defaults.items():
        header = column_for(new_mapping, field)
        if header is None:
            label = labels.get(field) or " ".join(part.capitalize() for part in field.split("_"))
            header = f"{label} (default)"
            if header not in headers:
                headers.append(header)
            new_mapping[header] = field
            for row in rows:
                row[header] = value
            continue

        for row in rows:
            if not (row.get(header) or "").strip():
                row[header] = value

    return (
        RawTable(headers=headers, rows=rows, warnings=list(table.warnings)),
        ColumnMapping(new_mapping),
    )
