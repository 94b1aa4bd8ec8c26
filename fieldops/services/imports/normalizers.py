"""
Value normalizers for imported cells.

Every function here is total: unparseable input returns the documented
default (or None) instead of raising, so preview and import always agree on
what a row will look like.
"""
import math
import re
from datetime import date, time
from decimal import Decimal, InvalidOperation
from typing import Optional

from fieldops.core.config import settings
from fieldops.utils.datetime import parse_date as _parse_date, parse_time as _parse_time
from fieldops.utils.phone import format_phone

DEFAULT_PRIORITY = "medium"
DEFAULT_JOB_STATUS = "pending"
DEFAULT_EQUIPMENT_STATUS = "active"
DEFAULT_DURATION_MINUTES = 60
MIN_DURATION_MINUTES = 15
MAX_DURATION_MINUTES = 480

_PRIORITY_ALIASES = {
    "low": ("low", "l", "1"),
    "high": ("high", "h", "3"),
    "urgent": ("urgent", "u", "critical", "4", "emergency", "asap"),
}

# Keys are compared with everything but letters stripped ("In Progress" -> "inprogress")
_JOB_STATUS_ALIASES = {
    "scheduled": ("scheduled", "sched"),
    "in_progress": ("inprogress", "active", "working", "started"),
    "completed": ("completed", "complete", "done", "finished"),
    "cancelled": ("cancelled", "canceled", "cancel"),
}

_EQUIPMENT_STATUS_ALIASES = {
    "inactive": ("inactive", "disabled", "decommissioned"),
    "maintenance": ("maintenance", "repair", "service"),
}

_DURATION_RGX = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([a-z]*)", re.I)
_CURRENCY_RGX = re.compile(r"^-?\d+(?:\.\d+)?$")


def _clean(value: Optional[str]) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a date cell; None when blank or unrecognized."""
    return _parse_date(_clean(value))


def parse_time(value: Optional[str]) -> Optional[time]:
    """Parse a time-of-day cell; None when blank or unrecognized."""
    return _parse_time(_clean(value))


def parse_priority(value: Optional[str]) -> str:
    """Map free text to low/medium/high/urgent, defaulting to medium."""
    normalized = _clean(value).lower()
    for priority, aliases in _PRIORITY_ALIASES.items():
        if normalized in aliases:
            return priority
    return DEFAULT_PRIORITY


def parse_job_status(value: Optional[str]) -> str:
    """Map free text to a job status, defaulting to pending."""
    normalized = re.sub(r"[^a-z]", "", _clean(value).lower())
    for status, aliases in _JOB_STATUS_ALIASES.items():
        if normalized in aliases:
            return status
    return DEFAULT_JOB_STATUS


def parse_equipment_status(value: Optional[str]) -> str:
    """Map free text to an equipment status, defaulting to active."""
    normalized = _clean(value).lower()
    for status, aliases in _EQUIPMENT_STATUS_ALIASES.items():
        if normalized in aliases:
            return status
    return DEFAULT_EQUIPMENT_STATUS


def parse_duration(value: Optional[str]) -> int:
    """
    Parse an estimated duration in minutes.

    Accepts ``90``, ``90 min`` and ``2 hours``. Anything outside
    15..480 minutes falls back to 60.
    """
    match = _DURATION_RGX.match(_clean(value))
    if not match:
        return DEFAULT_DURATION_MINUTES

    amount = float(match.group(1))
    unit = match.group(2).lower()
    if unit in ("h", "hr", "hrs", "hour", "hours"):
        amount *= 60
    if not math.isfinite(amount):
        return DEFAULT_DURATION_MINUTES
    minutes = int(amount)

    if MIN_DURATION_MINUTES <= minutes <= MAX_DURATION_MINUTES:
        return minutes
    return DEFAULT_DURATION_MINUTES


def parse_currency(value: Optional[str]) -> Optional[Decimal]:
    """
    Parse a money amount such as ``$1,250.00`` or ``(45.10)``.

    Comma decimal separators (``1.234,50``) are not supported and give None.
    """
    text = _clean(value)
    if not text:
        return None

    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1].strip()

    text = re.sub(r"^[A-Za-z]{3}\s*", "", text)  # USD 12.00
    text = text.replace("$", "").replace(" ", "")

    # Thousands separators only in groups of three before the decimal point
    if "," in text:
        if not re.match(r"^-?\d{1,3}(?:,\d{3})+(?:\.\d+)?$", text):
            return None
        text = text.replace(",", "")

    if not _CURRENCY_RGX.match(text):
        return None

    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    return -amount if negative else amount


def normalize_phone(value: Optional[str], default_region: Optional[str] = None) -> Optional[str]:
    """E.164 phone number when valid, otherwise the trimmed input; None when blank."""
    return format_phone(value, default_region or settings.PHONE_DEFAULT_REGION)


def normalize_email(value: Optional[str]) -> Optional[str]:
    """Trimmed, lower-cased email; None when blank."""
    text = _clean(value)
    return text.lower() if text else None


def normalize_text(value: Optional[str]) -> Optional[str]:
    """Trimmed text; None when blank."""
    text = _clean(value)
    return text or None
