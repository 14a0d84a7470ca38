"""Shared test helpers."""

import json
from datetime import UTC, datetime, timedelta
from typing import Any

from httpx import AsyncClient

from stockpile.db.connection import Database
from stockpile.models import ItemCreated, ItemDeleted, ItemUpdated


def make_item_created(
    item_id: int = 1, name: str = "Widget", quantity: int = 50
) -> ItemCreated:
    return ItemCreated(item_id=item_id, name=name, quantity=quantity)


def make_item_updated(item_id: int = 1, **changes: Any) -> ItemUpdated:
    """Create an ItemUpdated; pass old_/new_ pairs for the changed fields."""
    return ItemUpdated(item_id=item_id, **changes)


def make_item_deleted(
    item_id: int = 1, name: str = "Widget", quantity: int = 50
) -> ItemDeleted:
    return ItemDeleted(item_id=item_id, name=name, quantity=quantity)


class SteppingClock:
    """Deterministic clock for EventStore: each reading advances by `step`."""

    def __init__(
        self,
        start: datetime = datetime(2026, 1, 22, 12, 0, tzinfo=UTC),
        step: timedelta = timedelta(seconds=1),
    ) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


async def insert_raw_event(
    db: Database,
    event_type: str,
    payload: dict[str, Any] | str,
    item_id: int | None = None,
    created_at: str = "2026-01-22T12:00:00.000000+00:00",
) -> int:
    """Write an item_events row directly, bypassing EventStore validation."""
    raw = payload if isinstance(payload, str) else json.dumps(payload)
    cursor = await db.execute(
        "INSERT INTO item_events (item_id, event_type, payload, created_at) "
        "VALUES (?, ?, ?, ?)",
        (item_id, event_type, raw, created_at),
    )
    return cursor.lastrowid


# -- API-level helpers --


async def create_test_item(
    client: AsyncClient, name: str = "Widget", quantity: int = 50
) -> dict:
    """Create an item via the API and return the response JSON."""
    resp = await client.post("/api/items", json={"name": name, "quantity": quantity})
    assert resp.status_code == 201
    return resp.json()
