"""Event sourcing: append-only item event store and item projection."""

from stockpile.events.projector import ItemProjector, ReplayReport
from stockpile.events.store import EventStore

__all__ = ["EventStore", "ItemProjector", "ReplayReport"]
