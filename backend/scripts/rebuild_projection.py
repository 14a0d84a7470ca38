"""
Rebuild the items projection from the event log.

Drops the projected rows (all of them, or one item's) and replays the
matching events in a single transaction. Safe to re-run.

Usage:
    cd backend
    python scripts/rebuild_projection.py [item_id]
"""

import asyncio
import sys
from pathlib import Path

from stockpile.db.connection import Database
from stockpile.events.projector import ItemProjector
from stockpile.events.store import EventStore


def get_db_path() -> Path:
    """Resolve the database path relative to the backend directory."""
    backend_dir = Path(__file__).resolve().parent.parent
    return backend_dir / "stockpile.db"


async def rebuild(db_path: Path, item_id: int | None) -> None:
    db = await Database.connect(str(db_path))
    try:
        store = EventStore(db)
        report = await ItemProjector(db, store).rebuild_projection(item_id)
    finally:
        await db.close()

    scope = f"item {item_id}" if item_id is not None else "all items"
    print(f"Replayed {report.total} event(s) for {scope}.")
    print(f"  applied:                {report.applied}")
    print(f"  skipped, missing item:  {report.skipped_missing_target}")
    print(f"  skipped, unknown type:  {report.skipped_unknown_type}")
    print(f"  skipped, malformed:     {report.skipped_malformed}")


if __name__ == "__main__":
    target = int(sys.argv[1]) if len(sys.argv) > 1 else None
    asyncio.run(rebuild(get_db_path(), target))
