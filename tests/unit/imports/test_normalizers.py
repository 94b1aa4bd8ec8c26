from datetime import date, time
from decimal import Decimal

import pytest

from fieldops.services.imports import normalizers


@pytest.mark.parametrize("raw, expected", [
    ("2025-02-15", date(2025, 2, 15)),
    ("02/15/2025", date(2025, 2, 15)),
    ("2/5/2025", date(2025, 2, 5)),
    ("02-15-2025", date(2025, 2, 15)),
    ("2/5/25", date(2025, 2, 5)),
    ("2025-02-15T09:30:00Z", date(2025, 2, 15)),
    ("Jan 5, 2025", date(2025, 1, 5)),
    ("January 5 2025", date(2025, 1, 5)),
    ("5 Jan 2025", date(2025, 1, 5)),
    (" 2025-02-15 ", date(2025, 2, 15)),
])
def test_parse_date(raw, expected):
    assert normalizers.parse_date(raw) == expected


@pytest.mark.parametrize("raw", ["", None, "soon", "13/45/2025", "2025-02-30"])
def test_parse_date_returns_none_when_unparseable(raw):
    assert normalizers.parse_date(raw) is None


@pytest.mark.parametrize("raw, expected", [
    ("low", "low"), ("L", "low"), ("1", "low"),
    ("High", "high"), ("h", "high"), ("3", "high"),
    ("urgent", "urgent"), ("U", "urgent"), ("Critical", "urgent"), ("4", "urgent"),
    ("emergency", "urgent"), ("ASAP", "urgent"),
    ("medium", "medium"), ("2", "medium"),
])
def test_parse_priority(raw, expected):
    assert normalizers.parse_priority(raw) == expected


@pytest.mark.parametrize("raw", ["", None, "whenever", "5"])
def test_parse_priority_defaults_to_medium(raw):
    assert normalizers.parse_priority(raw) == "medium"


@pytest.mark.parametrize("raw, expected", [
    ("Scheduled", "scheduled"), ("sched", "scheduled"),
    ("In Progress", "in_progress"), ("in-progress", "in_progress"), ("active", "in_progress"),
    ("working", "in_progress"), ("started", "in_progress"),
    ("Completed", "completed"), ("done", "completed"), ("finished", "completed"),
    ("Cancelled", "cancelled"), ("canceled", "cancelled"), ("cancel", "cancelled"),
])
def test_parse_job_status(raw, expected):
    assert normalizers.parse_job_status(raw) == expected


@pytest.mark.parametrize("raw", ["", None, "on hold", "???"])
def test_parse_job_status_defaults_to_pending(raw):
    assert normalizers.parse_job_status(raw) == "pending"


@pytest.mark.parametrize("raw, expected", [
    ("inactive", "inactive"), ("Disabled", "inactive"), ("decommissioned", "inactive"),
    ("maintenance", "maintenance"), ("Repair", "maintenance"), ("service", "maintenance"),
    ("active", "active"), ("", "active"), (None, "active"), ("broken-ish", "active"),
])
def test_parse_equipment_status(raw, expected):
    assert normalizers.parse_equipment_status(raw) == expected


@pytest.mark.parametrize("raw, expected", [
    ("90", 90),
    ("90 min", 90),
    ("15", 15),
    ("480", 480),
    ("2 hours", 120),
    ("1.5h", 90),
    ("10", 60),
    ("481", 60),
    ("", 60),
    (None, 60),
    ("about an hour", 60),
    ("9" * 400, 60),
    ("9" * 400 + " hours", 60),
])
def test_parse_duration(raw, expected):
    assert normalizers.parse_duration(raw) == expected


@pytest.mark.parametrize("raw, expected", [
    ("14:30", time(14, 30)),
    ("2:30 PM", time(14, 30)),
    ("2pm", time(14, 0)),
    ("9:05 a.m.", time(9, 5)),
    ("", None),
    ("noonish", None),
])
def test_parse_time(raw, expected):
    assert normalizers.parse_time(raw) == expected


@pytest.mark.parametrize("raw, expected", [
    ("$1,250.00", Decimal("1250.00")),
    ("1250", Decimal("1250")),
    ("(45.10)", Decimal("-45.10")),
    ("USD 12.50", Decimal("12.50")),
    ("1.234,50", None),
    ("12,34", None),
    ("free", None),
    ("", None),
])
def test_parse_currency(raw, expected):
    assert normalizers.parse_currency(raw) == expected


def test_normalize_phone():
    assert normalizers.normalize_phone("(415) 555-2671") == "+14155552671"
    assert normalizers.normalize_phone("+44 20 8366 1177") == "+442083661177"
    # Unparseable numbers are kept as typed
    assert normalizers.normalize_phone("  call office  ") == "call office"
    assert normalizers.normalize_phone("") is None
    assert normalizers.normalize_phone(None) is None


def test_normalize_email():
    assert normalizers.normalize_email("  Contact@Acme.COM ") == "contact@acme.com"
    assert normalizers.normalize_email("   ") is None
