"""Item service: command handlers over the EventStore and ItemProjector.

Every command appends exactly one event and applies it to the projection in
the same transaction, so the log and the items table never disagree.
"""

import logging

from stockpile.db.connection import Database
from stockpile.events.projector import ItemProjector, ReplayReport
from stockpile.events.store import EventStore
from stockpile.items.schemas import (
    ItemEventResponse,
    ItemRequest,
    ItemResponse,
    ReplayReportResponse,
)
from stockpile.models import ItemCreated, ItemDeleted, ItemUpdated

logger = logging.getLogger(__name__)


class ItemNotFoundError(Exception):
    def __init__(self, item_id: int) -> None:
        super().__init__(f"Item not found: {item_id}")
        self.item_id = item_id


class ItemService:
    """Coordinates event store and projector for item CRUD."""

    def __init__(self, db: Database, store: EventStore, projector: ItemProjector) -> None:
        self._db = db
        self._store = store
        self._projector = projector

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def create_item(self, request: ItemRequest) -> ItemResponse:
        """Create a new item. Emits ItemCreated, projects, returns the item."""
        async with self._db.transaction():
            item_id = await self._store.next_item_id()
            event = ItemCreated(
                item_id=item_id, name=request.name, quantity=request.quantity
            )
            record = await self._store.append(event)
            await self._projector.apply(record)
            item = await self._projector.get_item(item_id)

        assert item is not None
        logger.info("Created item %s (%r)", item_id, request.name)
        return ItemResponse(**item)

    async def update_item(self, item_id: int, request: ItemRequest) -> ItemResponse:
        """Replace name and quantity. Emits one ItemUpdated carrying only the
        attributes that actually changed."""
        async with self._db.transaction():
            current = await self._projector.get_item(item_id)
            if current is None:
                raise ItemNotFoundError(item_id)

            changes: dict[str, object] = {}
            if request.name != current["name"]:
                changes["old_name"] = current["name"]
                changes["new_name"] = request.name
            if request.quantity != current["quantity"]:
                changes["old_quantity"] = current["quantity"]
                changes["new_quantity"] = request.quantity

            record = await self._store.append(ItemUpdated(item_id=item_id, **changes))
            await self._projector.apply(record)
            item = await self._projector.get_item(item_id)

        assert item is not None
        return ItemResponse(**item)

    async def delete_item(self, item_id: int) -> None:
        """Delete an item. The ItemDeleted event keeps its last known state."""
        async with self._db.transaction():
            current = await self._projector.get_item(item_id)
            if current is None:
                raise ItemNotFoundError(item_id)

            event = ItemDeleted(
                item_id=item_id, name=current["name"], quantity=current["quantity"]
            )
            record = await self._store.append(event)
            await self._projector.apply(record)

        logger.info("Deleted item %s", item_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_items(self) -> list[ItemResponse]:
        return [ItemResponse(**row) for row in await self._projector.list_items()]

    async def get_item(self, item_id: int) -> ItemResponse | None:
        item = await self._projector.get_item(item_id)
        if item is None:
            return None
        return ItemResponse(**item)

    async def get_item_events(self, item_id: int) -> list[ItemEventResponse]:
        """Event history of an item that still exists in the projection."""
        if await self._projector.get_item(item_id) is None:
            raise ItemNotFoundError(item_id)
        events = await self._store.fetch_for_item(item_id)
        return [ItemEventResponse(**event.model_dump()) for event in events]

    # ------------------------------------------------------------------
    # Replay
    # ------------------------------------------------------------------

    async def rebuild(self, item_id: int | None = None) -> ReplayReportResponse:
        report: ReplayReport = await self._projector.rebuild_projection(item_id)
        return ReplayReportResponse(**report.as_dict(), total=report.total)
