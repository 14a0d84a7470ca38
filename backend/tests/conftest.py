"""Shared pytest fixtures for Stockpile tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from stockpile.db.connection import Database
from stockpile.events.projector import ItemProjector
from stockpile.events.store import EventStore
from stockpile.items.router import get_item_service
from stockpile.items.service import ItemService
from stockpile.main import app


@pytest.fixture
async def db():
    """In-memory database for tests."""
    database = await Database.connect(":memory:")
    yield database
    await database.close()


@pytest.fixture
async def event_store(db):
    """EventStore backed by in-memory database."""
    return EventStore(db)


@pytest.fixture
async def projector(db, event_store):
    """ItemProjector backed by in-memory database."""
    return ItemProjector(db, event_store)


@pytest.fixture
async def service(db, event_store, projector):
    return ItemService(db, event_store, projector)


@pytest.fixture
async def client(service):
    """Async test client with in-memory DB wired into the app."""
    app.dependency_overrides[get_item_service] = lambda: service
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()
