"""
Utilities for standardized date and time handling.
"""
from datetime import date, datetime, time, timezone
from typing import Optional
import re

# Day-first formats are not accepted: spreadsheets from the field are US style.
DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%m/%d/%y",
    "%m-%d-%y",
    "%b %d, %Y",
    "%b %d %Y",
    "%B %d, %Y",
    "%B %d %Y",
    "%d %b %Y",
    "%d %B %Y",
)

TIME_FORMATS = (
    "%H:%M",
    "%H:%M:%S",
    "%I:%M %p",
    "%I:%M:%S %p",
    "%I %p",
)


def utc_now() -> datetime:
    """
    Get current UTC time as timezone-aware datetime.

    Returns:
        datetime: Current UTC time
    """
    return datetime.now(timezone.utc)


def parse_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a calendar date from a spreadsheet cell.

    Args:
        value: Cell text, e.g. ``2025-02-15``, ``2/15/2025`` or ``Feb 15, 2025``

    Returns:
        date: Parsed date or None if the text is not a recognizable date
    """
    if value is None:
        return None
    text = re.sub(r"\s+", " ", str(value).strip())
    if not text:
        return None

    # ISO datetimes, with or without a trailing Z
    if "T" in text and re.match(r"^\d{4}-\d{2}-\d{2}T", text):
        iso = text[:-1] + "+00:00" if text.endswith("Z") else text
        try:
            return datetime.fromisoformat(iso).date()
        except ValueError:
            return None

    # "Jan. 5, 2025" -> "Jan 5, 2025"
    text = re.sub(r"^([A-Za-z]{3,9})\.", r"\1", text)

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_time(value: Optional[str]) -> Optional[time]:
    """
    Parse a time of day such as ``14:30``, ``2:30 PM`` or ``2pm``.
    """
    if value is None:
        return None
    text = str(value).strip().upper().replace(".", "")
    if not text:
        return None

    # "2PM" / "2:30PM" -> "2 PM" / "2:30 PM"
    text = re.sub(r"^(\d{1,2}(?::\d{2}){0,2})\s*(AM|PM)$", r"\1 \2", text)

    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    return None


def format_date(value: Optional[date]) -> Optional[str]:
    """Format a date as ISO 8601 (``YYYY-MM-DD``)."""
    if value is None:
        return None
    return value.isoformat()
