import pytest

from fieldops.services.event_bus.bus import EventBus
from fieldops.services.event_bus.events import EventType


@pytest.mark.asyncio
async def test_publish_reaches_every_subscriber():
    bus = EventBus()
    seen = []

    async def first(data):
        seen.append(("first", data["processed"]))

    async def second(data):
        seen.append(("second", data["processed"]))

    await bus.subscribe(EventType.IMPORT_PROGRESS, first, "first")
    await bus.subscribe(EventType.IMPORT_PROGRESS, second, "second")

    assert await bus.publish(EventType.IMPORT_PROGRESS, {"processed": 10}) is True
    assert seen == [("first", 10), ("second", 10)]


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_stop_delivery():
    bus = EventBus()
    seen = []

    async def broken(data):
        raise RuntimeError("boom")

    async def healthy(data):
        seen.append(data["event_type"])

    await bus.subscribe(EventType.IMPORT_COMPLETED, broken, "broken")
    await bus.subscribe(EventType.IMPORT_COMPLETED, healthy, "healthy")

    assert await bus.publish(EventType.IMPORT_COMPLETED, {}) is False
    assert seen == ["import:completed"]
    assert bus.get_failed_deliveries("broken")["broken"][0]["error"] == "boom"


@pytest.mark.asyncio
async def test_publish_does_not_mutate_payload():
    bus = EventBus()

    async def noop(data):
        pass

    await bus.subscribe(EventType.IMPORT_PROGRESS, noop, "noop")
    payload = {"processed": 1}
    await bus.publish(EventType.IMPORT_PROGRESS, payload)

    assert payload == {"processed": 1}
    assert bus.get_event_history(limit=1)[0]["event_type"] == "import:progress"


@pytest.mark.asyncio
async def test_resubscribing_replaces_callback():
    bus = EventBus()
    seen = []

    async def old(data):
        seen.append("old")

    async def new(data):
        seen.append("new")

    await bus.subscribe(EventType.IMPORT_PROGRESS, old, "listener")
    await bus.subscribe(EventType.IMPORT_PROGRESS, new, "listener")
    await bus.publish(EventType.IMPORT_PROGRESS, {})

    assert seen == ["new"]
    assert bus.get_subscriber_count() == 1


@pytest.mark.asyncio
async def test_shutdown_clears_subscribers():
    bus = EventBus()

    async def noop(data):
        pass

    await bus.subscribe(EventType.IMPORT_PROGRESS, noop)
    await bus.shutdown()

    assert bus.get_subscriber_count() == 0
