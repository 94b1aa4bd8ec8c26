from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from fieldops.core.exceptions import PersistenceError
from fieldops.schemas.imports import EntityType
from fieldops.services.imports.events import ImportEventType
from fieldops.services.imports.executor import ImportExecutor, spreadsheet_row
from fieldops.services.imports.mapping import ColumnMapping

CLIENT_MAPPING = ColumnMapping({"Name": "name", "Email": "email", "Phone": "phone"})


def client_rows(count):
    return [{"Name": f"Client {i}", "Email": "", "Phone": ""} for i in range(count)]


def test_spreadsheet_row():
    assert spreadsheet_row(0) == 2
    assert spreadsheet_row(9) == 11


@pytest.mark.asyncio
async def test_all_rows_imported(store):
    result = await ImportExecutor(store).run(EntityType.CLIENTS, client_rows(3), CLIENT_MAPPING)

    assert result.success_count == 3
    assert result.failed_count == 0
    assert result.errors == []
    assert store.insert_client.await_count == 3
    names = [call.args[0].name for call in store.insert_client.await_args_list]
    assert names == ["Client 0", "Client 1", "Client 2"]


@pytest.mark.asyncio
async def test_persistence_failures_do_not_stop_the_run(store):
    calls = {"n": 0}

    async def flaky_insert(record):
        calls["n"] += 1
        if record.name in ("Client 3", "Client 7"):
            raise PersistenceError("duplicate key value violates unique constraint")
        return f"rec-{calls['n']}"

    store.insert_client.side_effect = flaky_insert

    result = await ImportExecutor(store).run(EntityType.CLIENTS, client_rows(12), CLIENT_MAPPING)

    assert result.success_count == 10
    assert result.failed_count == 2
    assert [e.row for e in result.errors] == [5, 9]
    assert "unique constraint" in result.errors[0].error
    assert store.insert_client.await_count == 12


@pytest.mark.asyncio
async def test_unexpected_store_errors_are_counted_as_failed(store):
    async def dropping_insert(record):
        if record.name == "Client 1":
            raise ConnectionResetError("backend went away")
        return "rec"

    store.insert_client.side_effect = dropping_insert

    result = await ImportExecutor(store).run(EntityType.CLIENTS, client_rows(3), CLIENT_MAPPING)

    assert result.success_count == 2
    assert result.failed_count == 1
    assert result.errors[0].row == 3
    assert "backend went away" in result.errors[0].error


@pytest.mark.asyncio
async def test_oversized_duration_falls_back_to_default(store):
    rows = [{"Title": "A", "Duration": "9" * 400}, {"Title": "B", "Duration": "30"}]
    mapping = ColumnMapping({"Title": "title", "Duration": "estimated_duration"})

    result = await ImportExecutor(store).run(EntityType.JOBS, rows, mapping)

    assert result.success_count == 2
    durations = [call.args[0].estimated_duration for call in store.insert_job.await_args_list]
    assert durations == [60, 30]


@pytest.mark.asyncio
async def test_invalid_rows_are_counted_as_failed(store):
    rows = [
        {"Name": "Acme", "Email": "", "Phone": ""},
        {"Name": "", "Email": "missing@name.com", "Phone": ""},
        {"Name": "Globex", "Email": "", "Phone": ""},
    ]

    result = await ImportExecutor(store).run(EntityType.CLIENTS, rows, CLIENT_MAPPING)

    assert result.success_count == 2
    assert result.failed_count == 1
    assert result.errors[0].row == 3
    assert result.errors[0].error == "Missing required field: name"
    assert store.insert_client.await_count == 2


@pytest.mark.asyncio
async def test_client_values_are_normalized(store):
    rows = [{"Name": "  Acme  ", "Email": " Contact@ACME.com ", "Phone": "(415) 555-2671"}]

    await ImportExecutor(store).run(EntityType.CLIENTS, rows, CLIENT_MAPPING)

    record = store.insert_client.await_args.args[0]
    assert record.name == "Acme"
    assert record.email == "contact@acme.com"
    assert record.phone == "+14155552671"


@pytest.mark.asyncio
async def test_jobs_are_matched_to_clients(store_factory):
    store = store_factory(client_index={"acme corporation": "client-1"})
    rows = [
        {"Title": "HVAC Maintenance", "Customer": "ACME Corporation", "Date": "02/15/2025",
         "Priority": "Critical", "Cost": "$1,250.00"},
        {"Title": "Filter Swap", "Customer": "Unknown Co", "Date": "", "Priority": "", "Cost": ""},
    ]
    mapping = ColumnMapping({
        "Title": "title", "Customer": "client_name", "Date": "scheduled_date",
        "Priority": "priority", "Cost": "estimated_cost",
    })

    result = await ImportExecutor(store).run(EntityType.JOBS, rows, mapping)

    assert result.success_count == 2
    first, second = [call.args[0] for call in store.insert_job.await_args_list]
    assert first.client_id == "client-1"
    assert first.scheduled_date == date(2025, 2, 15)
    assert first.priority == "urgent"
    assert first.estimated_cost == Decimal("1250.00")
    assert second.client_id is None
    assert second.priority == "medium"
    assert second.status == "pending"
    assert second.estimated_duration == 60


@pytest.mark.asyncio
async def test_client_index_failure_imports_without_matching(store_factory):
    store = store_factory()
    store.client_index.side_effect = RuntimeError("timeout")
    rows = [{"Type": "Air Conditioner", "Owner": "Acme"}]
    mapping = ColumnMapping({"Type": "equipment_type", "Owner": "client_name"})

    result = await ImportExecutor(store).run(EntityType.EQUIPMENT, rows, mapping)

    assert result.success_count == 1
    assert store.insert_equipment.await_args.args[0].client_id is None


@pytest.mark.asyncio
async def test_clients_do_not_load_client_index(store):
    await ImportExecutor(store).run(EntityType.CLIENTS, client_rows(1), CLIENT_MAPPING)

    store.client_index.assert_not_awaited()


@pytest.mark.asyncio
async def test_notifier_called_for_clients_with_email(store):
    notifier = AsyncMock()
    rows = [
        {"Name": "Acme", "Email": "contact@acme.com", "Phone": ""},
        {"Name": "Globex", "Email": "", "Phone": ""},
    ]

    await ImportExecutor(store, notifier=notifier).run(EntityType.CLIENTS, rows, CLIENT_MAPPING)

    notifier.client_imported.assert_awaited_once()
    client_id, record = notifier.client_imported.await_args.args
    assert client_id == "rec-1"
    assert record.email == "contact@acme.com"


@pytest.mark.asyncio
async def test_notifier_failure_does_not_fail_the_row(store):
    notifier = AsyncMock()
    notifier.client_imported.side_effect = RuntimeError("portal down")
    rows = [{"Name": "Acme", "Email": "contact@acme.com", "Phone": ""}]

    result = await ImportExecutor(store, notifier=notifier).run(EntityType.CLIENTS, rows, CLIENT_MAPPING)

    assert result.success_count == 1
    assert result.failed_count == 0


@pytest.mark.asyncio
async def test_error_list_is_bounded(store):
    rows = [{"Name": "", "Email": "", "Phone": ""} for _ in range(5)]

    result = await ImportExecutor(store, error_sample_size=2).run(EntityType.CLIENTS, rows, CLIENT_MAPPING)

    assert result.failed_count == 5
    assert [e.row for e in result.errors] == [2, 3]
    assert result.errors_truncated is True


@pytest.mark.asyncio
async def test_progress_and_completion_events(store):
    events = []

    async def on_event(event):
        events.append(event)

    rows = client_rows(5) + [{"Name": "", "Email": "", "Phone": ""}]
    executor = ImportExecutor(store, progress_callback=on_event, progress_every=2)

    await executor.run(EntityType.CLIENTS, rows, CLIENT_MAPPING, duplicate_count=1)

    progress = [e for e in events if e["type"] == ImportEventType.PROGRESS]
    assert [e["processed"] for e in progress] == [2, 4, 6]
    assert progress[-1]["percent"] == 100.0
    assert progress[-1]["failed"] == 1

    completed = events[-1]
    assert completed["type"] == ImportEventType.COMPLETED
    assert completed["successful"] == 5
    assert completed["failed"] == 1
    assert completed["duplicate_count"] == 1
    assert completed["final_status"] == "partial_success"
    assert completed["error_summary"] == [{"row": 7, "error": "Missing required field: name"}]


@pytest.mark.asyncio
async def test_callback_errors_are_ignored(store):
    async def broken(event):
        raise RuntimeError("socket closed")

    result = await ImportExecutor(store, progress_callback=broken).run(
        EntityType.CLIENTS, client_rows(2), CLIENT_MAPPING
    )

    assert result.success_count == 2


@pytest.mark.asyncio
async def test_empty_run(store):
    events = []

    async def on_event(event):
        events.append(event)

    result = await ImportExecutor(store, progress_callback=on_event).run(EntityType.CLIENTS, [], CLIENT_MAPPING)

    assert result.total_rows == 0
    assert result.success_rate == 0.0
    assert [e["type"] for e in events] == [ImportEventType.COMPLETED]
    assert events[0]["final_status"] == "empty"


@pytest.mark.asyncio
async def test_reimporting_creates_records_again(store):
    executor = ImportExecutor(store)

    first = await executor.run(EntityType.CLIENTS, client_rows(2), CLIENT_MAPPING, duplicate_count=0)
    second = await executor.run(EntityType.CLIENTS, client_rows(2), CLIENT_MAPPING, duplicate_count=2)

    assert first.success_count == second.success_count == 2
    assert second.duplicate_count == 2
    assert store.insert_client.await_count == 4
