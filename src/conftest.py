from contextlib import asynccontextmanager

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event

from src.config.database import engine
from src.events import EventBus, LifecycleEventType
from src.guests.repository import orm_models as guest_models  # noqa: F401
from src.main import app
from src.models import BaseModel
from src.transport.repository import orm_models as transport_models  # noqa: F401


@pytest_asyncio.fixture(autouse=True)
async def test_db():
    """Create every table before a test and drop them afterwards."""
    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.drop_all)
        await conn.run_sync(BaseModel.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.drop_all)


@pytest.fixture
def sqlite_foreign_keys():
    """Enforce foreign keys on every sqlite connection opened during the test."""

    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    event.listen(engine.sync_engine, "connect", enable_foreign_keys)
    yield
    event.remove(engine.sync_engine, "connect", enable_foreign_keys)


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def recorded_events(event_bus):
    """Every event emitted on ``event_bus``, in order."""
    events = []

    def record(event):
        events.append(event)

    for event_type in LifecycleEventType:
        event_bus.subscribe(event_type, record)
    return events


@pytest.fixture
def client_factory():
    """Build a test client with FastAPI dependency overrides."""

    @asynccontextmanager
    async def factory(overrides: dict | None = None):
        app.dependency_overrides.update(overrides or {})
        transport = ASGITransport(app=app)
        try:
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                yield ac
        finally:
            app.dependency_overrides.clear()

    return factory


@pytest_asyncio.fixture
async def client(client_factory):
    """Create a test client."""
    async with client_factory() as ac:
        yield ac
