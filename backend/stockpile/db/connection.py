"""Async SQLite connection wrapper with WAL mode, schema init and transactions."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, nullcontext

import aiosqlite

from stockpile.db.schema import SCHEMA_SQL

logger = logging.getLogger(__name__)


class Database:
    """Thin async wrapper around aiosqlite with WAL mode and auto-schema.

    Outside a transaction every write commits immediately. Inside
    ``transaction()`` the owning task's statements share one SQLite
    transaction, and statements from any other task wait until it ends.
    """

    def __init__(self, connection: aiosqlite.Connection) -> None:
        self._conn = connection
        self._lock = asyncio.Lock()
        self._owner: asyncio.Task | None = None

    @classmethod
    async def connect(cls, path: str = "stockpile.db") -> "Database":
        """Create a connection with WAL mode, foreign keys, and schema init."""
        conn = await aiosqlite.connect(path)
        conn.row_factory = aiosqlite.Row
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA foreign_keys=ON")
        await conn.execute("PRAGMA busy_timeout=5000")
        db = cls(conn)
        await db._ensure_schema()
        return db

    async def _ensure_schema(self) -> None:
        """Create tables if they don't exist. Idempotent."""
        await self._conn.executescript(SCHEMA_SQL)
        await self._conn.commit()

    @property
    def in_transaction(self) -> bool:
        return self._owner is not None and self._owner is asyncio.current_task()

    def _guard(self):
        # The transaction owner already holds the lock.
        return nullcontext() if self.in_transaction else self._lock

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Run the enclosed statements atomically.

        Commits when the block exits cleanly; rolls back and re-raises on
        any error. Nested use by the same task joins the outer transaction.
        """
        if self.in_transaction:
            yield
            return

        async with self._lock:
            self._owner = asyncio.current_task()
            try:
                await self._conn.execute("BEGIN")
                yield
            except BaseException:
                await self._conn.rollback()
                logger.debug("Transaction rolled back")
                raise
            else:
                await self._conn.commit()
            finally:
                self._owner = None

    async def execute(self, sql: str, params: tuple | None = None) -> aiosqlite.Cursor:
        """Execute a single SQL statement."""
        async with self._guard():
            cursor = await self._conn.execute(sql, params or ())
            if not self.in_transaction:
                await self._conn.commit()
            return cursor

    async def fetchone(self, sql: str, params: tuple | None = None) -> aiosqlite.Row | None:
        """Execute and return a single row."""
        async with self._guard():
            cursor = await self._conn.execute(sql, params or ())
            return await cursor.fetchone()

    async def fetchall(self, sql: str, params: tuple | None = None) -> list[aiosqlite.Row]:
        """Execute and return all rows."""
        async with self._guard():
            cursor = await self._conn.execute(sql, params or ())
            return list(await cursor.fetchall())

    async def close(self) -> None:
        """Close the database connection."""
        await self._conn.close()
