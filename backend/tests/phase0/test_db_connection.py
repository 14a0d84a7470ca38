"""Integration tests for database connection, schema and transactions."""

import os
import tempfile

import aiosqlite
import pytest

from stockpile.db.connection import Database


class TestDatabaseConnection:
    async def test_connect_creates_tables(self):
        db = await Database.connect(":memory:")
        try:
            rows = await db.fetchall(
                "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
            )
            table_names = {row["name"] for row in rows}
            assert "item_events" in table_names
            assert "items" in table_names
        finally:
            await db.close()

    async def test_event_table_has_no_updated_at(self, db):
        rows = await db.fetchall("PRAGMA table_info(item_events)")
        columns = {row["name"] for row in rows}
        assert columns == {"id", "item_id", "event_type", "payload", "created_at"}

    async def test_wal_mode_on_file_database(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "test.db")
            db = await Database.connect(path)
            try:
                row = await db.fetchone("PRAGMA journal_mode")
                assert row is not None
                assert row["journal_mode"] == "wal"
            finally:
                await db.close()

    async def test_schema_idempotent(self, db):
        await db._ensure_schema()
        rows = await db.fetchall("SELECT name FROM sqlite_master WHERE type='table'")
        assert len(rows) >= 2


class TestTransactions:
    async def test_commit_on_success(self, db):
        async with db.transaction():
            await db.execute(
                "INSERT INTO items (id, name, quantity, created_at, updated_at) "
                "VALUES (1, 'A', 1, 'x', 'x')"
            )
        assert await db.fetchone("SELECT * FROM items WHERE id = 1") is not None

    async def test_rollback_on_error(self, db):
        with pytest.raises(RuntimeError):
            async with db.transaction():
                await db.execute(
                    "INSERT INTO items (id, name, quantity, created_at, updated_at) "
                    "VALUES (1, 'A', 1, 'x', 'x')"
                )
                raise RuntimeError("boom")
        assert await db.fetchone("SELECT * FROM items WHERE id = 1") is None

    async def test_storage_error_propagates_and_rolls_back(self, db):
        with pytest.raises(aiosqlite.Error):
            async with db.transaction():
                await db.execute(
                    "INSERT INTO items (id, name, quantity, created_at, updated_at) "
                    "VALUES (1, 'A', 1, 'x', 'x')"
                )
                await db.execute("INSERT INTO no_such_table VALUES (1)")
        assert await db.fetchone("SELECT * FROM items WHERE id = 1") is None

    async def test_nested_transaction_joins_outer(self, db):
        with pytest.raises(RuntimeError):
            async with db.transaction():
                async with db.transaction():
                    await db.execute(
                        "INSERT INTO items (id, name, quantity, created_at, updated_at) "
                        "VALUES (1, 'A', 1, 'x', 'x')"
                    )
                raise RuntimeError("outer fails")
        assert await db.fetchone("SELECT * FROM items WHERE id = 1") is None
