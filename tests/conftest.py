import os
from collections.abc import AsyncGenerator
from typing import Dict, List
from unittest.mock import AsyncMock

# Settings are read at import time; point the app at SQLite before it loads.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("PORTAL_INVITE_URL", "")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from fieldops.main import app
from fieldops.db.base import Base
from fieldops.db.session import get_db
from fieldops.schemas.client import ClientSummary
from fieldops.schemas.job import JobSummary

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_TENANT = "tenant-acme"


@pytest_asyncio.fixture()
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    # One shared connection keeps the in-memory database alive for the test
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(base_url="http://testserver", transport=transport) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture()
def tenant_headers() -> Dict[str, str]:
    return {"X-Tenant-ID": TEST_TENANT}


def make_store(
    clients: List[ClientSummary] = None,
    jobs: List[JobSummary] = None,
    serials: List[str] = None,
    client_index: Dict[str, str] = None,
) -> AsyncMock:
    """Record store double; inserts return sequential ids."""
    store = AsyncMock()
    store.tenant_id = TEST_TENANT
    counter = {"n": 0}

    async def next_id(record):
        counter["n"] += 1
        return f"rec-{counter['n']}"

    store.insert_client.side_effect = next_id
    store.insert_job.side_effect = next_id
    store.insert_equipment.side_effect = next_id
    store.existing_clients.return_value = clients or []
    store.existing_jobs.return_value = jobs or []
    store.existing_serials.return_value = serials or []
    store.client_index.return_value = client_index or {}
    return store


@pytest.fixture()
def store() -> AsyncMock:
    return make_store()


@pytest.fixture()
def store_factory():
    return make_store
