"""Item projector: folds item events into the items table.

The read side of the event log. Each event type has one handler; types
without a handler are skipped. Replay is tolerant: an event whose target
row is missing, or whose payload lacks what its handler needs, is skipped
and counted rather than raised.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from stockpile.db.connection import Database
from stockpile.events.store import EventStore, format_timestamp
from stockpile.models import EventType, StoredEvent

logger = logging.getLogger(__name__)


class ApplyOutcome(Enum):
    APPLIED = "applied"
    MISSING_TARGET = "missing_target"
    UNKNOWN_TYPE = "unknown_type"
    MALFORMED = "malformed"


@dataclass
class ReplayReport:
    """What happened to each event during one projection run."""

    applied: int = 0
    skipped_missing_target: int = 0
    skipped_unknown_type: int = 0
    skipped_malformed: int = 0

    @property
    def total(self) -> int:
        return (
            self.applied
            + self.skipped_missing_target
            + self.skipped_unknown_type
            + self.skipped_malformed
        )

    def record(self, outcome: ApplyOutcome) -> None:
        if outcome is ApplyOutcome.APPLIED:
            self.applied += 1
        elif outcome is ApplyOutcome.MISSING_TARGET:
            self.skipped_missing_target += 1
        elif outcome is ApplyOutcome.UNKNOWN_TYPE:
            self.skipped_unknown_type += 1
        else:
            self.skipped_malformed += 1

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


def _item_id_of(event: StoredEvent) -> int | None:
    item_id = event.payload.get("item_id", event.item_id)
    return item_id if isinstance(item_id, int) else None


class ItemProjector:
    """Projects item events into the materialized items table."""

    def __init__(self, db: Database, store: EventStore) -> None:
        self._db = db
        self._store = store
        self._handlers: dict[EventType, Callable[[StoredEvent], Awaitable[ApplyOutcome]]] = {
            EventType.ITEM_CREATED: self._handle_item_created,
            EventType.ITEM_UPDATED: self._handle_item_updated,
            EventType.ITEM_DELETED: self._handle_item_deleted,
        }

    async def apply(self, event: StoredEvent) -> ApplyOutcome:
        """Apply a single stored event to the projection."""
        event_type = event.known_type
        handler = self._handlers.get(event_type) if event_type else None
        if handler is None:
            logger.debug(
                "Skipping event %s with unknown type %r", event.id, event.event_type
            )
            return ApplyOutcome.UNKNOWN_TYPE
        return await handler(event)

    async def project(self, events: list[StoredEvent]) -> ReplayReport:
        """Apply a batch of events in the order given."""
        report = ReplayReport()
        for event in events:
            report.record(await self.apply(event))
        return report

    async def rebuild_projection(self, item_id: int | None = None) -> ReplayReport:
        """Clear the projection and replay the log into it.

        With ``item_id`` only that item's row and events are touched.
        Clearing and replay share one transaction: readers see either the
        old projection or the fully rebuilt one. Any storage error rolls the
        whole rebuild back and propagates.
        """
        async with self._db.transaction():
            if item_id is not None:
                await self._db.execute("DELETE FROM items WHERE id = ?", (item_id,))
                events = await self._store.fetch_for_item(item_id)
            else:
                await self._db.execute("DELETE FROM items")
                events = await self._store.fetch_all()

            report = await self.project(events)

        logger.info(
            "Rebuilt projection (%s): %d events, %d applied, %d skipped",
            f"item {item_id}" if item_id is not None else "all items",
            report.total,
            report.applied,
            report.total - report.applied,
        )
        return report

    async def get_item(self, item_id: int) -> dict[str, Any] | None:
        """Read projected item state. Returns None if not found."""
        row = await self._db.fetchone("SELECT * FROM items WHERE id = ?", (item_id,))
        if row is None:
            return None
        return dict(row)

    async def list_items(self) -> list[dict[str, Any]]:
        """Read all projected items, newest first."""
        rows = await self._db.fetchall(
            "SELECT * FROM items ORDER BY created_at DESC, id DESC"
        )
        return [dict(row) for row in rows]

    # -- handlers --

    async def _handle_item_created(self, event: StoredEvent) -> ApplyOutcome:
        """Insert the item under the id the event carries.

        A second Created for the same id overwrites the row.
        """
        item_id = _item_id_of(event)
        name = event.payload.get("name")
        quantity = event.payload.get("quantity")
        if item_id is None or name is None or quantity is None:
            logger.warning("ItemCreated event %s is malformed, skipping", event.id)
            return ApplyOutcome.MALFORMED

        timestamp = format_timestamp(event.created_at)
        await self._db.execute(
            """
            INSERT OR REPLACE INTO items (id, name, quantity, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (item_id, name, quantity, timestamp, timestamp),
        )
        return ApplyOutcome.APPLIED

    async def _handle_item_updated(self, event: StoredEvent) -> ApplyOutcome:
        """Set only the attributes whose new value the payload carries."""
        item_id = _item_id_of(event)
        if item_id is None:
            logger.warning("ItemUpdated event %s has no item_id, skipping", event.id)
            return ApplyOutcome.MALFORMED
        if await self.get_item(item_id) is None:
            logger.warning(
                "ItemUpdated event %s targets missing item %s, skipping",
                event.id,
                item_id,
            )
            return ApplyOutcome.MISSING_TARGET

        updates: dict[str, Any] = {}
        if event.payload.get("new_name") is not None:
            updates["name"] = event.payload["new_name"]
        if event.payload.get("new_quantity") is not None:
            updates["quantity"] = event.payload["new_quantity"]
        if not updates:
            return ApplyOutcome.APPLIED

        updates["updated_at"] = format_timestamp(event.created_at)
        assignments = ", ".join(f"{column} = ?" for column in updates)
        await self._db.execute(
            f"UPDATE items SET {assignments} WHERE id = ?",
            (*updates.values(), item_id),
        )
        return ApplyOutcome.APPLIED

    async def _handle_item_deleted(self, event: StoredEvent) -> ApplyOutcome:
        item_id = _item_id_of(event)
        if item_id is None:
            logger.warning("ItemDeleted event %s has no item_id, skipping", event.id)
            return ApplyOutcome.MALFORMED
        if await self.get_item(item_id) is None:
            logger.warning(
                "ItemDeleted event %s targets missing item %s, skipping",
                event.id,
                item_id,
            )
            return ApplyOutcome.MISSING_TARGET

        await self._db.execute("DELETE FROM items WHERE id = ?", (item_id,))
        return ApplyOutcome.APPLIED
