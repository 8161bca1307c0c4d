"""Record builders and a frozen clock shared by the test modules."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

from wellness_engine import AssessmentRecord, EntryRecord

# Wednesday
NOW = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)


def at(days_ago: int = 0, hour: int = 12, minute: int = 0) -> datetime:
    return NOW.replace(hour=hour, minute=minute) - timedelta(days=days_ago)


def entry(days_ago: int = 0, emotion: str = "Calm", intensity: float = 5, rid: str = None, hour: int = 12, text: str = "") -> EntryRecord:
    return EntryRecord(
        id=rid or f"e-{days_ago}-{emotion}-{intensity}-{hour}",
        text=text,
        timestamp=at(days_ago, hour),
        emotion=emotion,
        intensity=intensity,
    )


def assessment(days_ago: int = 0, score: float = 50, rid: str = None, hour: int = 12, name: str = "PHQ-9") -> AssessmentRecord:
    return AssessmentRecord(
        id=rid or f"a-{days_ago}-{score}-{hour}",
        test_name=name,
        category="Depression",
        score=score,
        timestamp=at(days_ago, hour),
        test_id="phq9",
    )


class FakeStore:
    """In-memory stand-in for RecordStore."""

    def __init__(self, entries=None, assessments=None):
        self.entries = list(entries or [])
        self.assessments = list(assessments or [])
        self.fail_writes = False
        self.fail_deletes = False
        self.gate = None
        self.ack_gate = None
        self.deleted = []
        self._n = 0

    async def list_entries(self, user_id=None):
        return sorted(self.entries, key=lambda e: e.timestamp, reverse=True)

    async def list_assessments(self, user_id=None):
        return sorted(self.assessments, key=lambda a: a.timestamp, reverse=True)

    async def insert_entry(self, record, user_id=None):
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_writes:
            raise ConnectionError("store offline")
        self._n += 1
        saved = replace(record, id=f"saved-{self._n}")
        self.entries.append(saved)
        if self.ack_gate is not None:
            await self.ack_gate.wait()
        return saved

    async def delete_entry(self, entry_id, user_id=None):
        if self.fail_deletes:
            raise ConnectionError("store offline")
        self.deleted.append(entry_id)
        before = len(self.entries)
        self.entries = [e for e in self.entries if e.id != entry_id]
        return len(self.entries) != before

    async def insert_assessment(self, record, user_id=None):
        self._n += 1
        saved = replace(record, id=f"saved-{self._n}")
        self.assessments.append(saved)
        return saved, ("remote" if user_id else "local")
