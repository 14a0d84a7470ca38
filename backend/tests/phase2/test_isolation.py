"""Transactional boundaries: commands and rebuilds are all-or-nothing."""

import asyncio

import pytest

from stockpile.items.schemas import ItemRequest
from stockpile.models import EventType


class TestCommandAtomicity:
    async def test_failed_projection_discards_the_event(
        self, service, projector, event_store, monkeypatch
    ):
        async def broken_apply(event):
            raise RuntimeError("projection write failed")

        monkeypatch.setattr(projector, "apply", broken_apply)

        with pytest.raises(RuntimeError):
            await service.create_item(ItemRequest(name="Widget", quantity=1))

        assert await event_store.fetch_all() == []
        assert await projector.list_items() == []

    async def test_failed_delete_keeps_item(self, service, projector, event_store, monkeypatch):
        item = await service.create_item(ItemRequest(name="Widget", quantity=1))

        async def broken_apply(event):
            raise RuntimeError("projection write failed")

        monkeypatch.setattr(projector, "apply", broken_apply)

        with pytest.raises(RuntimeError):
            await service.delete_item(item.id)

        assert len(await event_store.fetch_for_item(item.id)) == 1
        assert await projector.get_item(item.id) is not None


class TestReaderIsolation:
    async def test_reader_waits_for_rebuild(self, service, projector, monkeypatch):
        await service.create_item(ItemRequest(name="A", quantity=1))
        await service.create_item(ItemRequest(name="B", quantity=2))

        entered = asyncio.Event()
        release = asyncio.Event()
        original = projector._handlers[EventType.ITEM_CREATED]

        async def paused(event):
            entered.set()
            await release.wait()
            return await original(event)

        monkeypatch.setitem(projector._handlers, EventType.ITEM_CREATED, paused)

        rebuild = asyncio.create_task(projector.rebuild_projection())
        await entered.wait()

        reader = asyncio.create_task(projector.list_items())
        await asyncio.sleep(0.05)
        assert not reader.done()

        release.set()
        await rebuild
        assert len(await reader) == 2
