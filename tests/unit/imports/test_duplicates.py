import asyncio
from datetime import date

import pytest

from fieldops.schemas.client import ClientSummary
from fieldops.schemas.imports import EntityType
from fieldops.schemas.job import JobSummary
from fieldops.services.imports.duplicates import DuplicateDetector
from fieldops.services.imports.mapping import ColumnMapping


@pytest.mark.asyncio
async def test_clients_match_on_name_or_email(store_factory):
    store = store_factory(clients=[
        ClientSummary(id="c1", name="Acme Corporation", email="contact@acme.com"),
        ClientSummary(id="c2", name="Initech", email=None),
    ])
    rows = [
        {"Name": "ACME corporation", "Email": ""},        # name
        {"Name": "Acme Holdings", "Email": "Contact@Acme.com"},  # email
        {"Name": "Globex", "Email": "info@globex.com"},
        {"Name": " initech ", "Email": ""},
    ]
    mapping = ColumnMapping({"Name": "name", "Email": "email"})

    result = await DuplicateDetector(store).detect(EntityType.CLIENTS, rows, mapping)

    assert result.indices == {0, 1, 3}
    assert result.duplicate_count == 3
    assert result.is_checking is False


@pytest.mark.asyncio
async def test_jobs_match_on_title_and_date(store_factory):
    store = store_factory(jobs=[
        JobSummary(id="j1", title="HVAC Maintenance", scheduled_date=date(2025, 2, 15)),
        JobSummary(id="j2", title="Filter Swap", scheduled_date=None),
    ])
    rows = [
        {"Title": "hvac maintenance", "Date": "02/15/2025"},
        {"Title": "HVAC Maintenance", "Date": "2025-02-16"},
        {"Title": "Filter Swap", "Date": ""},
        {"Title": "", "Date": "2025-02-15"},
    ]
    mapping = ColumnMapping({"Title": "title", "Date": "scheduled_date"})

    result = await DuplicateDetector(store).detect(EntityType.JOBS, rows, mapping)

    assert result.indices == {0}


@pytest.mark.asyncio
async def test_undated_jobs_never_match(store_factory):
    store = store_factory(jobs=[JobSummary(id="j1", title="Tune-up", scheduled_date=None)])
    rows = [
        {"Title": "Tune-up", "Date": "not a date"},
        {"Title": "Tune-up", "Date": ""},
    ]
    mapping = ColumnMapping({"Title": "title", "Date": "scheduled_date"})

    result = await DuplicateDetector(store).detect(EntityType.JOBS, rows, mapping)

    assert result.indices == set()
    assert result.duplicate_count == 0


@pytest.mark.asyncio
async def test_equipment_matches_on_serial(store_factory):
    store = store_factory(serials=["AC-2024-001", "  "])
    rows = [
        {"Type": "AC", "Serial": "ac-2024-001"},
        {"Type": "AC", "Serial": ""},
        {"Type": "Furnace", "Serial": "F-9"},
    ]
    mapping = ColumnMapping({"Type": "equipment_type", "Serial": "serial_number"})

    result = await DuplicateDetector(store).detect(EntityType.EQUIPMENT, rows, mapping)

    assert result.indices == {0}
    assert result.duplicate_count == 1


@pytest.mark.asyncio
async def test_no_existing_records(store):
    rows = [{"Name": "Acme"}]

    result = await DuplicateDetector(store).detect(EntityType.CLIENTS, rows, {"Name": "name"})

    assert result.indices == set()
    assert result.duplicate_count == 0


@pytest.mark.asyncio
async def test_lookup_failure_reports_no_duplicates(store, caplog):
    store.existing_clients.side_effect = RuntimeError("connection reset")

    result = await DuplicateDetector(store).detect(EntityType.CLIENTS, [{"Name": "Acme"}], {"Name": "name"})

    assert result.duplicate_count == 0
    assert result.is_checking is False
    assert "Duplicate lookup failed" in caplog.text


@pytest.mark.asyncio
async def test_background_check_reports_checking_until_done(store_factory):
    release = asyncio.Event()
    store = store_factory()

    async def slow_clients():
        await release.wait()
        return [ClientSummary(id="c1", name="Acme")]

    store.existing_clients.side_effect = slow_clients

    check = DuplicateDetector(store).start(EntityType.CLIENTS, [{"Name": "Acme"}], {"Name": "name"})
    await asyncio.sleep(0)

    snapshot = check.snapshot()
    assert snapshot.is_checking is True
    assert snapshot.duplicate_count == 0
    assert not check.done

    release.set()
    result = await check.wait()

    assert result.indices == {0}
    assert check.snapshot().duplicate_count == 1
    assert check.snapshot().is_checking is False


@pytest.mark.asyncio
async def test_cancelled_check_is_empty(store_factory):
    store = store_factory()

    async def never():
        await asyncio.Event().wait()

    store.existing_clients.side_effect = never

    check = DuplicateDetector(store).start(EntityType.CLIENTS, [{"Name": "Acme"}], {"Name": "name"})
    await asyncio.sleep(0)
    check.cancel()

    result = await check.wait()

    assert result.duplicate_count == 0
    assert check.snapshot().is_checking is False
