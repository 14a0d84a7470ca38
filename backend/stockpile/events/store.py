"""Append-only event store backed by SQLite."""

from collections.abc import Callable
from datetime import UTC, datetime

from stockpile.db.connection import Database
from stockpile.models import ItemEvent, StoredEvent
from stockpile.utils.json import dump_payload, parse_payload

# Replay order: chronological, ties broken by insertion order.
_ORDER = "ORDER BY created_at, id"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class EventStore:
    """Append-only log of item events. The write side of the projection.

    There is deliberately no update or delete method.
    """

    def __init__(self, db: Database, clock: Callable[[], datetime] = _utcnow) -> None:
        self._db = db
        self._clock = clock
        self._last_created_at: datetime | None = None

    def _next_created_at(self) -> datetime:
        """Clock reading that never goes backwards for this store."""
        now = self._clock().astimezone(UTC)
        if self._last_created_at is not None and now < self._last_created_at:
            now = self._last_created_at
        self._last_created_at = now
        return now

    async def append(self, event: ItemEvent) -> StoredEvent:
        """Append an event and return the stored record with its assigned id."""
        payload = event.to_payload()
        created_at = self._next_created_at()
        cursor = await self._db.execute(
            """
            INSERT INTO item_events (item_id, event_type, payload, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (
                event.item_id,
                str(event.event_type),
                dump_payload(payload),
                format_timestamp(created_at),
            ),
        )
        assert cursor.lastrowid is not None
        return StoredEvent(
            id=cursor.lastrowid,
            item_id=event.item_id,
            event_type=str(event.event_type),
            payload=payload,
            created_at=created_at,
        )

    async def fetch_for_item(self, item_id: int) -> list[StoredEvent]:
        """All events for one item in replay order. Empty if there are none."""
        rows = await self._db.fetchall(
            f"SELECT * FROM item_events WHERE item_id = ? {_ORDER}",
            (item_id,),
        )
        return [self._row_to_event(row) for row in rows]

    async def fetch_all(self) -> list[StoredEvent]:
        """The entire log in replay order."""
        rows = await self._db.fetchall(f"SELECT * FROM item_events {_ORDER}")
        return [self._row_to_event(row) for row in rows]

    async def get_event(self, event_id: int) -> StoredEvent | None:
        row = await self._db.fetchone(
            "SELECT * FROM item_events WHERE id = ?", (event_id,)
        )
        if row is None:
            return None
        return self._row_to_event(row)

    async def next_item_id(self) -> int:
        """Allocate an id for a new item.

        Ids are never reused: the log remembers deleted items even after
        their projection rows are gone.
        """
        row = await self._db.fetchone(
            """
            SELECT MAX(
                COALESCE((SELECT MAX(item_id) FROM item_events), 0),
                COALESCE((SELECT MAX(id) FROM items), 0)
            ) AS max_id
            """
        )
        return (row["max_id"] if row is not None else 0) + 1

    @staticmethod
    def _row_to_event(row) -> StoredEvent:
        """Convert a database row to a StoredEvent."""
        return StoredEvent(
            id=row["id"],
            item_id=row["item_id"],
            event_type=row["event_type"],
            payload=parse_payload(row["payload"]),
            created_at=row["created_at"],
        )


def format_timestamp(value: datetime) -> str:
    # Fixed width so lexical order in SQLite matches chronological order.
    return value.isoformat(timespec="microseconds")
