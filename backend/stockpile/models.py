"""Canonical event types and stored records for Stockpile.

Defined once here, referenced everywhere else. Each event variant knows how
to render its own payload; the StoredEvent wraps a payload with the metadata
the event store assigns on append.
"""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


def _utcnow() -> datetime:
    return datetime.now(UTC)


class EventType(StrEnum):
    ITEM_CREATED = "ItemCreated"
    ITEM_UPDATED = "ItemUpdated"
    ITEM_DELETED = "ItemDeleted"


# ---------------------------------------------------------------------------
# Event variants
# ---------------------------------------------------------------------------


class _ItemEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    item_id: int
    timestamp: datetime = Field(default_factory=_utcnow)

    def to_payload(self) -> dict[str, Any]:
        raise NotImplementedError


class ItemCreated(_ItemEvent):
    event_type: Literal["ItemCreated"] = "ItemCreated"
    name: str
    quantity: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "name": self.name,
            "quantity": self.quantity,
            "timestamp": self.timestamp.isoformat(),
        }


class ItemUpdated(_ItemEvent):
    """Only the attributes that changed are carried.

    A pair that was never passed is left out of the payload entirely, which
    is how "unchanged" is told apart from "changed to None".
    """

    event_type: Literal["ItemUpdated"] = "ItemUpdated"
    old_name: str | None = None
    new_name: str | None = None
    old_quantity: int | None = None
    new_quantity: int | None = None

    @model_validator(mode="after")
    def _pairs_set_together(self) -> "ItemUpdated":
        for old, new in (("old_name", "new_name"), ("old_quantity", "new_quantity")):
            if (old in self.model_fields_set) != (new in self.model_fields_set):
                raise ValueError(f"{old} and {new} must be given together")
        return self

    @property
    def name_changed(self) -> bool:
        return "new_name" in self.model_fields_set

    @property
    def quantity_changed(self) -> bool:
        return "new_quantity" in self.model_fields_set

    def to_payload(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "item_id": self.item_id,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.name_changed:
            data["old_name"] = self.old_name
            data["new_name"] = self.new_name
        if self.quantity_changed:
            data["old_quantity"] = self.old_quantity
            data["new_quantity"] = self.new_quantity
        return data


class ItemDeleted(_ItemEvent):
    event_type: Literal["ItemDeleted"] = "ItemDeleted"
    name: str
    quantity: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "name": self.name,
            "quantity": self.quantity,
            "timestamp": self.timestamp.isoformat(),
        }


ItemEvent = Annotated[
    ItemCreated | ItemUpdated | ItemDeleted,
    Field(discriminator="event_type"),
]

EVENT_TYPES: dict[EventType, type[_ItemEvent]] = {
    EventType.ITEM_CREATED: ItemCreated,
    EventType.ITEM_UPDATED: ItemUpdated,
    EventType.ITEM_DELETED: ItemDeleted,
}


# ---------------------------------------------------------------------------
# Stored record
# ---------------------------------------------------------------------------


class StoredEvent(BaseModel):
    """One row of the item_events table. Never updated after append."""

    model_config = ConfigDict(frozen=True)

    id: int
    item_id: int | None = None
    event_type: str  # kept loose so rows of unknown types still load
    payload: dict[str, Any]
    created_at: datetime

    @property
    def known_type(self) -> EventType | None:
        try:
            return EventType(self.event_type)
        except ValueError:
            return None

    def to_event(self) -> _ItemEvent:
        """Rebuild the typed event from the stored payload.

        Raises ValueError for unknown types and ValidationError for payloads
        that do not fit the declared type.
        """
        event_cls = EVENT_TYPES[EventType(self.event_type)]
        return event_cls.model_validate(self.payload)
