"""Tests for optimistic journal insertion and deletion."""

from __future__ import annotations

import asyncio

import pytest

from factories import NOW, FakeStore, entry
from wellness_service.journal_session import EntryState, JournalSession, SessionRegistry


def test_add_confirms_and_swaps_id():
    store = FakeStore()
    session = JournalSession(store, "u1")

    async def run():
        await session.load()
        return await session.add_entry("I feel overwhelmed and can't wait", now=NOW)

    tracked = asyncio.run(run())
    assert tracked.state == EntryState.CONFIRMED
    assert tracked.record.id == "saved-1"
    assert tracked.record.emotion == "Excited"
    assert tracked.record.intensity == 8.0
    assert tracked.record.timestamp == NOW
    assert session.entries()[0].id == "saved-1"


def test_entry_is_visible_while_pending():
    store = FakeStore()
    session = JournalSession(store)

    async def run():
        store.gate = asyncio.Event()
        task = asyncio.create_task(session.add_entry("quiet", emotion="calm", now=NOW))
        await asyncio.sleep(0)
        (pending,) = session.tracked()
        seen = (pending.state, pending.record.id)
        store.gate.set()
        await task
        return seen

    state, rid = asyncio.run(run())
    assert state == EntryState.PENDING
    assert rid.startswith("tmp-")
    assert session.tracked()[0].state == EntryState.CONFIRMED


def test_failed_write_keeps_entry():
    store = FakeStore()
    store.fail_writes = True
    session = JournalSession(store, "u1")
    tracked = asyncio.run(session.add_entry("sad day", now=NOW))
    assert tracked.state == EntryState.FAILED_KEPT
    assert tracked.record.id.startswith("tmp-")
    assert tracked.error == "ConnectionError"
    assert tracked.to_dict()["state"] == "failed_kept"
    assert session.entries() == [tracked.record]


def test_refresh_keeps_failed_entries():
    store = FakeStore(entries=[entry(1, rid="old")])
    session = JournalSession(store, "u1")

    async def run():
        await session.load()
        store.fail_writes = True
        await session.add_entry("lost", now=NOW)
        store.fail_writes = False
        await session.add_entry("kept", now=NOW)
        return await session.refresh()

    items = asyncio.run(run())
    states = sorted((t.record.text, t.state.value) for t in items)
    assert ("lost", "failed_kept") in states
    assert ("kept", "confirmed") in states
    assert len(items) == 3


def test_explicit_emotion_and_default_intensity():
    session = JournalSession(FakeStore())
    tracked = asyncio.run(session.add_entry("x", emotion="lonely", now=NOW))
    assert tracked.record.emotion == "Lonely"
    assert tracked.record.intensity == 5.0


def test_out_of_range_intensity_raises():
    session = JournalSession(FakeStore())
    with pytest.raises(ValueError):
        asyncio.run(session.add_entry("x", emotion="calm", intensity=11, now=NOW))
    assert session.tracked() == []


def test_delete_removes_memory_then_storage():
    store = FakeStore(entries=[entry(0, rid="a"), entry(1, rid="b")])
    session = JournalSession(store)

    async def run():
        await session.load()
        return await session.delete_entry("a")

    assert asyncio.run(run()) is True
    assert [e.id for e in session.entries()] == ["b"]
    assert store.deleted == ["a"]


def test_delete_storage_failure_is_logged_not_raised():
    store = FakeStore(entries=[entry(0, rid="a")])
    store.fail_deletes = True
    session = JournalSession(store)

    async def run():
        await session.load()
        return await session.delete_entry("a")

    assert asyncio.run(run()) is True
    assert session.entries() == []


def test_delete_unsaved_entry_skips_storage():
    store = FakeStore()
    store.fail_writes = True
    session = JournalSession(store)
    tracked = asyncio.run(session.add_entry("x", now=NOW))
    assert asyncio.run(session.delete_entry(tracked.record.id)) is True
    assert store.deleted == []


def test_registry_reuses_sessions():
    store = FakeStore(entries=[entry(0, rid="a")])
    registry = SessionRegistry(store)

    async def run():
        first = await registry.get("u1")
        again = await registry.get("u1")
        other = await registry.get(None)
        return first, again, other

    first, again, other = asyncio.run(run())
    assert first is again
    assert first is not other
    assert first.loaded


def test_refresh_during_write_does_not_duplicate():
    store = FakeStore()
    session = JournalSession(store, "u1")

    async def run():
        store.ack_gate = asyncio.Event()
        task = asyncio.create_task(session.add_entry("quiet", emotion="calm", now=NOW))
        await asyncio.sleep(0)
        # row is committed but not yet acknowledged
        await session.refresh()
        store.ack_gate.set()
        return await task

    tracked = asyncio.run(run())
    assert tracked.state == EntryState.CONFIRMED
    assert [t.record.id for t in session.tracked()] == ["saved-1"]
