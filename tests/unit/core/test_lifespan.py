import pytest

from fieldops.core import events
from fieldops.main import app


@pytest.mark.asyncio
async def test_lifespan_runs_startup_then_shutdown(monkeypatch):
    calls = []

    async def startup():
        calls.append("startup")

    async def shutdown():
        calls.append("shutdown")

    monkeypatch.setattr(events, "startup_event_handler", startup)
    monkeypatch.setattr(events, "shutdown_event_handler", shutdown)

    async with events.lifespan(app):
        assert calls == ["startup"]

    assert calls == ["startup", "shutdown"]


@pytest.mark.asyncio
async def test_shutdown_runs_when_serving_fails(monkeypatch):
    calls = []

    async def record(name):
        calls.append(name)

    monkeypatch.setattr(events, "startup_event_handler", lambda: record("startup"))
    monkeypatch.setattr(events, "shutdown_event_handler", lambda: record("shutdown"))

    with pytest.raises(RuntimeError):
        async with events.lifespan(app):
            raise RuntimeError("server crashed")

    assert calls == ["startup", "shutdown"]
