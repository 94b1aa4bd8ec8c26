"""
CSV parser for the import wizard.

Turns decoded CSV text into a RawTable of headers and rows keyed by header.
The parser is line oriented: every physical line is one record, so quoted
values may contain commas and escaped quotes but not newlines. It is
best-effort and never raises; anything it has to repair is reported in
``RawTable.warnings``.
"""
import csv
import logging
import re
from typing import Dict, List, Optional

from fieldops.core.config import settings
from fieldops.schemas.imports import RawTable

logger = logging.getLogger("fieldops.imports.parser")

_LINE_SPLIT_RGX = re.compile(r"\r?\n")

EMPTY_FILE_WARNING = "CSV file is empty"


class CSVParserConfig:
    """Limits applied while parsing an uploaded file."""

    def __init__(
        self,
        max_rows: Optional[int] = None,
        max_columns: Optional[int] = None,
        max_field_length: Optional[int] = None,
    ):
        self.max_rows = max_rows if max_rows is not None else settings.IMPORT_MAX_ROWS
        self.max_columns = max_columns if max_columns is not None else settings.IMPORT_MAX_COLUMNS
        self.max_field_length = (
            max_field_length if max_field_length is not None else settings.IMPORT_MAX_FIELD_LENGTH
        )


def parse_csv_line(line: str) -> List[str]:
    """
    Split one CSV line into cells.

    Handles double-quoted cells with embedded commas and ``""`` escapes.
    A line the csv module rejects falls back to a plain comma split.
    """
    try:
        cells = next(csv.reader([line], delimiter=",", quotechar='"', skipinitialspace=True, strict=True), [])
    except csv.Error:
        logger.debug(f"Falling back to plain split for malformed line: {line[:80]!r}")
        cells = line.split(",")
    return [cell.strip() for cell in cells]


def _clean_header(cell: str) -> str:
    return cell.strip().strip('"').strip()


def parse(text: Optional[str], config: Optional[CSVParserConfig] = None) -> RawTable:
    """
    Parse CSV text into a RawTable.

    Args:
        text: Decoded file contents
        config: Parser limits (defaults come from settings)

    Returns:
        RawTable: Headers, rows and any non-fatal warnings
    """
    config = config or CSVParserConfig()

    lines = [line for line in _LINE_SPLIT_RGX.split(text or "") if line.strip()]
    if not lines:
        logger.info("Parsed empty CSV input")
        return RawTable(headers=[], rows=[], warnings=[EMPTY_FILE_WARNING])

    warnings: List[str] = []
    headers = [_clean_header(cell) for cell in parse_csv_line(lines[0])]

    if len(headers) > config.max_columns:
        message = f"Too many columns: {len(headers)} (maximum {config.max_columns})"
        logger.warning(message)
        return RawTable(headers=[], rows=[], warnings=[message])

    data_lines = lines[1:]
    if len(data_lines) > config.max_rows:
        warnings.append(
            f"File has {len(data_lines)} rows; only the first {config.max_rows} will be imported"
        )
        data_lines = data_lines[:config.max_rows]

    truncated_cells = 0
    rows: List[Dict[str, str]] = []
    for offset, line in enumerate(data_lines):
        cells = parse_csv_line(line)

        if len(cells) != len(headers):
            # Spreadsheet row number: header is row 1
            warnings.append(
                f"Row {offset + 2}: expected {len(headers)} columns, got {len(cells)}"
            )

        row: Dict[str, str] = {}
        for header, cell in zip(headers, cells):
            if len(cell) > config.max_field_length:
                cell = cell[:config.max_field_length]
                truncated_cells += 1
            row[header] = cell
        rows.append(row)

    if truncated_cells:
        warnings.append(
            f"{truncated_cells} value(s) longer than {config.max_field_length} characters were truncated"
        )

    logger.info(f"Parsed CSV with {len(headers)} columns and {len(rows)} rows")
    return RawTable(headers=headers, rows=rows, warnings=warnings)
