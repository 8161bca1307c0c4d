# -*- coding: utf-8 -*-
"""journal_session.py

Optimistic journal list
-----------------------

Keeps one user's entries in memory so a new entry is visible before storage
acknowledges it. Each tracked entry is a small state machine::

    pending -> confirmed      (write acknowledged, temporary id swapped)
    pending -> failed_kept    (write failed; the entry stays visible)

Refreshing from storage replaces confirmed entries and keeps ``failed_kept``
ones. Deletion removes from memory first, then from storage; a storage
failure is logged and not re-raised.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from wellness_engine import EntryRecord, classify_emotion
from wellness_engine.models import DEFAULT_INTENSITY
from wellness_engine.normalize import title_case
from wellness_engine.timeutil import resolve_now

from .observability import log_event
from .record_store import RecordStore

logger = logging.getLogger("journal_session")


class EntryState(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED_KEPT = "failed_kept"


@dataclass
class TrackedEntry:
    record: EntryRecord
    state: EntryState
    error: Optional[str] = None

    def to_dict(self):
        d = self.record.to_dict()
        d["state"] = self.state.value
        if self.error:
            d["error"] = self.error
        return d


def temp_id() -> str:
    return f"tmp-{uuid.uuid4().hex[:12]}"


class JournalSession:
    def __init__(self, store: RecordStore, user_id: Optional[str] = None):
        self.store = store
        self.user_id = user_id
        self._items: List[TrackedEntry] = []
        self.loaded = False

    def tracked(self) -> List[TrackedEntry]:
        return list(self._items)

    def entries(self) -> List[EntryRecord]:
        """Records for the engine, newest first."""
        return [t.record for t in self._items]

    async def refresh(self) -> List[TrackedEntry]:
        records = await self.store.list_entries(self.user_id)
        stored_ids = {r.id for r in records}
        kept = [
            t for t in self._items
            if t.state in (EntryState.FAILED_KEPT, EntryState.PENDING) and t.record.id not in stored_ids
        ]
        items = kept + [TrackedEntry(record=r, state=EntryState.CONFIRMED) for r in records]
        items.sort(key=lambda t: t.record.timestamp, reverse=True)
        self._items = items
        self.loaded = True
        return self.tracked()

    async def load(self) -> List[TrackedEntry]:
        if not self.loaded:
            await self.refresh()
        return self.tracked()

    async def add_entry(
        self,
        text: str,
        emotion: Optional[str] = None,
        intensity: Optional[float] = None,
        source: str = "journal",
        now: Optional[datetime] = None,
    ) -> TrackedEntry:
        """Prepend a pending entry, then persist it.

        Without an explicit emotion the classifier picks both label and
        intensity; with one, a missing intensity falls back to the mid value.
        """
        if emotion is None:
            result = classify_emotion(text)
            label = title_case(result.emotion)
            value = float(intensity if intensity is not None else result.intensity)
        else:
            label = title_case(emotion)
            value = float(intensity if intensity is not None else DEFAULT_INTENSITY)
        if not 0.0 <= value <= 10.0:
            raise ValueError(f"intensity must be within 0..10, got {value!r}")

        record = EntryRecord(
            id=temp_id(),
            text=text,
            timestamp=resolve_now(now),
            emotion=label,
            intensity=value,
            source=source or "journal",
        )
        tracked = TrackedEntry(record=record, state=EntryState.PENDING)
        self._items.insert(0, tracked)

        try:
            saved = await self.store.insert_entry(record, self.user_id)
        except Exception as exc:
            tracked.state = EntryState.FAILED_KEPT
            tracked.error = type(exc).__name__
            log_event(
                logger,
                "entry_write_failed",
                level="error",
                user_id=self.user_id,
                temp_id=record.id,
                error=f"{type(exc).__name__}: {exc}",
            )
            return tracked

        tracked.record = replace(record, id=saved.id)
        tracked.state = EntryState.CONFIRMED
        # a refresh during the write may already hold the stored row
        self._items = [t for t in self._items if t is tracked or t.record.id != saved.id]
        log_event(logger, "entry_saved", level="debug", user_id=self.user_id, temp_id=record.id, entry_id=saved.id)
        return tracked

    async def delete_entry(self, entry_id: str) -> bool:
        """Remove from memory, then storage. Returns whether memory held it."""
        before = len(self._items)
        removed = [t for t in self._items if t.record.id == entry_id]
        self._items = [t for t in self._items if t.record.id != entry_id]
        found = len(self._items) != before

        # unsaved entries have nothing in storage
        if removed and all(t.state != EntryState.CONFIRMED for t in removed):
            return found
        try:
            await self.store.delete_entry(entry_id, self.user_id)
        except Exception as exc:
            log_event(
                logger,
                "entry_delete_failed",
                level="error",
                user_id=self.user_id,
                entry_id=entry_id,
                error=f"{type(exc).__name__}: {exc}",
            )
        return found


class SessionRegistry:
    """One JournalSession per user id (None = device-local guest)."""

    def __init__(self, store: RecordStore):
        self.store = store
        self._sessions: Dict[Optional[str], JournalSession] = {}
        self._lock = asyncio.Lock()

    async def get(self, user_id: Optional[str] = None) -> JournalSession:
        async with self._lock:
            session = self._sessions.get(user_id)
            if session is None:
                session = JournalSession(self.store, user_id)
                self._sessions[user_id] = session
        await session.load()
        return session
