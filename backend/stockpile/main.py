"""Stockpile FastAPI application entry point."""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockpile.db.connection import Database
from stockpile.events.projector import ItemProjector
from stockpile.events.store import EventStore
from stockpile.items.router import get_item_service
from stockpile.items.router import router as items_router
from stockpile.items.service import ItemService

VERSION = "0.1.0"

# Load .env from backend/ directory before reading any settings
load_dotenv(Path(__file__).resolve().parent.parent / ".env")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage database lifecycle and service wiring."""
    logging.basicConfig(
        level=os.environ.get("STOCKPILE_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db = await Database.connect(os.environ.get("STOCKPILE_DB_PATH", "stockpile.db"))

    store = EventStore(db)
    projector = ItemProjector(db, store)
    service = ItemService(db, store, projector)
    app.dependency_overrides[get_item_service] = lambda: service

    app.state.db = db
    yield

    await db.close()


app = FastAPI(
    title="Stockpile",
    description="Event-sourced inventory tracker with a replayable item projection",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin.strip()
        for origin in os.environ.get(
            "STOCKPILE_CORS_ORIGINS", "http://localhost:5173"
        ).split(",")
        if origin.strip()
    ],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(items_router)


@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok", "version": VERSION}


@app.get("/api/ping")
async def ping() -> dict:
    return {"status": "ok", "message": "Pong!"}
