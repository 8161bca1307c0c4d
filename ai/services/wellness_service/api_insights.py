# -*- coding: utf-8 -*-
"""
Insights API
------------
- GET /insights/snapshot : WellnessSnapshot for a window
- GET /insights/series   : gap-filled day series (kind=journal|assessment)
- GET /insights/streak   : current streak + this week's view

Window query: ``window=day|week|month|year|rolling|<N>d`` with ``days`` for
``rolling``. Invalid values answer 400.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from wellness_engine import compute_series, compute_snapshot, compute_streak

from .deps import clean_user_id, clock_now, load_records, window_or_400
from .observability import elapsed_ms, log_event, monotonic_ms, new_run_id

logger = logging.getLogger("api_insights")

SERIES_KINDS = {
    "journal": "intensity",
    "assessment": "score",
}


class SnapshotResponse(BaseModel):
    user_id: Optional[str] = None
    window: str
    snapshot: Dict[str, Any]


class SeriesResponse(BaseModel):
    user_id: Optional[str] = None
    window: str
    kind: str
    value_key: str
    buckets: List[Dict[str, Any]] = Field(default_factory=list)


class StreakResponse(BaseModel):
    user_id: Optional[str] = None
    current_streak: int
    last_7_days: List[Dict[str, Any]] = Field(default_factory=list)


def register_insights_routes(app: FastAPI) -> None:
    """Register /insights/* routes."""

    @app.get("/insights/snapshot", response_model=SnapshotResponse)
    async def snapshot(
        user_id: Optional[str] = Query(default=None),
        window: Optional[str] = Query(default="week", description="day/week/month/year/rolling/<N>d"),
        days: Optional[int] = Query(default=None, ge=1, description="rolling window length"),
        refresh: bool = Query(default=False),
    ) -> SnapshotResponse:
        spec = window_or_400(window, days)
        uid = clean_user_id(user_id)
        run_id = new_run_id("snap")
        t0 = monotonic_ms()
        entries, assessments = await load_records(app, uid, refresh)
        snap = compute_snapshot(entries, assessments, spec, clock_now(app))
        log_event(
            logger,
            "insights_snapshot",
            level="debug",
            run_id=run_id,
            user_id=uid,
            window=spec.label(),
            total=snap.total_count,
            elapsed_ms=elapsed_ms(t0),
        )
        return SnapshotResponse(user_id=uid, window=spec.label(), snapshot=snap.to_dict())

    @app.get("/insights/series", response_model=SeriesResponse)
    async def series(
        user_id: Optional[str] = Query(default=None),
        kind: str = Query(default="journal", description="journal | assessment"),
        window: Optional[str] = Query(default="week"),
        days: Optional[int] = Query(default=None, ge=1),
        refresh: bool = Query(default=False),
    ) -> SeriesResponse:
        value_key = SERIES_KINDS.get(kind)
        if value_key is None:
            raise HTTPException(status_code=400, detail=f"kind must be one of {sorted(SERIES_KINDS)}")
        spec = window_or_400(window, days)
        uid = clean_user_id(user_id)
        now = clock_now(app)
        entries, assessments = await load_records(app, uid, refresh)
        records = entries if kind == "journal" else assessments
        buckets = compute_series(records, value_key, spec.days(now.date()), now)
        return SeriesResponse(
            user_id=uid,
            window=spec.label(),
            kind=kind,
            value_key=value_key,
            buckets=[b.to_dict() for b in buckets],
        )

    @app.get("/insights/streak", response_model=StreakResponse)
    async def streak(
        user_id: Optional[str] = Query(default=None),
        refresh: bool = Query(default=False),
    ) -> StreakResponse:
        uid = clean_user_id(user_id)
        entries, _ = await load_records(app, uid, refresh)
        state = compute_streak(entries, clock_now(app))
        d = state.to_dict()
        return StreakResponse(user_id=uid, current_streak=d["current_streak"], last_7_days=d["last_7_days"])
