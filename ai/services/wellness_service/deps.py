# -*- coding: utf-8 -*-
"""Shared route helpers: app-scoped services, clock, query parsing."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import FastAPI, HTTPException

from wellness_engine import AssessmentRecord, EntryRecord, WindowSpec, parse_window
from wellness_engine.timeutil import resolve_now

from .journal_session import SessionRegistry
from .record_store import RecordStore
from .settings_bus import SettingsBus


def record_store(app: FastAPI) -> RecordStore:
    return app.state.record_store


def sessions(app: FastAPI) -> SessionRegistry:
    return app.state.sessions


def settings_bus(app: FastAPI) -> SettingsBus:
    return app.state.settings_bus


def clock_now(app: FastAPI) -> datetime:
    """Request time; tests pin it with ``app.state.clock``."""
    clock = getattr(app.state, "clock", None)
    return resolve_now(clock() if clock else None)


def clean_user_id(user_id: Optional[str]) -> Optional[str]:
    s = str(user_id or "").strip()
    return s or None


def window_or_400(window: Optional[str], days: Optional[int]) -> WindowSpec:
    try:
        return parse_window(window, days)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


async def load_records(
    app: FastAPI, user_id: Optional[str], refresh: bool = False
) -> Tuple[List[EntryRecord], List[AssessmentRecord]]:
    """Session entries (optimistic ones included) and stored assessments."""

    async def _entries() -> List[EntryRecord]:
        session = await sessions(app).get(user_id)
        if refresh:
            await session.refresh()
        return session.entries()

    entries, assessments = await asyncio.gather(
        _entries(),
        record_store(app).list_assessments(user_id),
    )
    return entries, assessments
