"""
Seed the database with sample inventory items.

Items go through the normal command path, so every seeded row has a
matching ItemCreated event in the log.

Usage:
    cd backend
    python scripts/seed_items.py [count]
"""

import asyncio
import random
import sys
from pathlib import Path

from stockpile.db.connection import Database
from stockpile.events.projector import ItemProjector
from stockpile.events.store import EventStore
from stockpile.items.schemas import ItemRequest
from stockpile.items.service import ItemService

PRODUCTS = [
    "Laptop",
    "Wireless Mouse",
    "Mechanical Keyboard",
    "USB-C Cable",
    "Monitor",
    "Desk Chair",
    "Standing Desk",
    "Headphones",
    "Webcam",
    "External Hard Drive",
    "Phone Charger",
    "HDMI Cable",
    "Printer",
    "Scanner",
    "Notebook",
    "Pen Set",
    "Desk Lamp",
    "Cable Organizer",
    "Power Strip",
    "Document Holder",
]


def get_db_path() -> Path:
    """Resolve the database path relative to the backend directory."""
    backend_dir = Path(__file__).resolve().parent.parent
    return backend_dir / "stockpile.db"


async def seed(db_path: Path, count: int) -> None:
    db = await Database.connect(str(db_path))
    try:
        store = EventStore(db)
        service = ItemService(db, store, ItemProjector(db, store))
        for _ in range(count):
            item = await service.create_item(ItemRequest(
                name=random.choice(PRODUCTS),
                quantity=random.randint(0, 1000),
            ))
            print(f"  #{item.id}: {item.name} x{item.quantity}")
    finally:
        await db.close()

    print(f"Created {count} items with corresponding events!")


if __name__ == "__main__":
    n = int(sys.argv[1]) if len(sys.argv) > 1 else 10
    asyncio.run(seed(get_db_path(), n))
