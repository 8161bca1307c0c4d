# -*- coding: utf-8 -*-
"""
Journal API
-----------
- POST   /emotion/analyze            : classify free text (no storage)
- GET    /journal/entries            : entries with their optimistic state
- POST   /journal/entries            : optimistic add
- DELETE /journal/entries/{entry_id} : delete

Notes:
- ``user_id`` is taken as given; omitted means the device-local guest.
- A failed write does not fail the request: the entry comes back with
  state ``failed_kept``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from wellness_engine import classify_emotion, guidance_for
from wellness_engine.normalize import title_case

from .deps import clean_user_id, clock_now, sessions

logger = logging.getLogger("api_journal")


class AnalyzeRequest(BaseModel):
    text: str = Field(..., min_length=1, description="Free-text mood entry")


class AnalyzeResponse(BaseModel):
    emotion: str = Field(..., description="Category key (lower-case)")
    label: str = Field(..., description="Display label (Title Case)")
    intensity: int = Field(..., ge=3, le=10)
    scores: Dict[str, int] = Field(default_factory=dict)
    guidance: str


class JournalEntryCreate(BaseModel):
    user_id: Optional[str] = Field(default=None, description="Owner; omit for the local guest store")
    text: str = Field(..., min_length=1, description="Entry text")
    emotion: Optional[str] = Field(default=None, description="Explicit label; classified from text when omitted")
    intensity: Optional[float] = Field(default=None, ge=0, le=10, description="0..10")
    source: str = Field(default="journal", description="journal | dashboard | awareness")


class JournalEntryResponse(BaseModel):
    item: Dict[str, Any]


class JournalListResponse(BaseModel):
    user_id: Optional[str] = None
    items: List[Dict[str, Any]] = Field(default_factory=list)


def register_journal_routes(app: FastAPI) -> None:
    """Register /emotion/analyze and /journal/entries routes."""

    @app.post("/emotion/analyze", response_model=AnalyzeResponse)
    async def analyze(req: AnalyzeRequest) -> AnalyzeResponse:
        text = req.text.strip()
        if not text:
            raise HTTPException(status_code=400, detail="text must not be blank")
        result = classify_emotion(text)
        return AnalyzeResponse(
            emotion=result.emotion,
            label=title_case(result.emotion),
            intensity=result.intensity,
            scores=result.scores,
            guidance=guidance_for(result.emotion),
        )

    @app.get("/journal/entries", response_model=JournalListResponse)
    async def list_entries(
        user_id: Optional[str] = Query(default=None),
        refresh: bool = Query(default=False, description="Re-read storage before answering"),
    ) -> JournalListResponse:
        uid = clean_user_id(user_id)
        session = await sessions(app).get(uid)
        if refresh:
            await session.refresh()
        return JournalListResponse(user_id=uid, items=[t.to_dict() for t in session.tracked()])

    @app.post("/journal/entries", response_model=JournalEntryResponse)
    async def add_entry(req: JournalEntryCreate) -> JournalEntryResponse:
        text = req.text.strip()
        if not text:
            raise HTTPException(status_code=400, detail="text must not be blank")
        session = await sessions(app).get(clean_user_id(req.user_id))
        try:
            tracked = await session.add_entry(
                text,
                emotion=req.emotion,
                intensity=req.intensity,
                source=req.source,
                now=clock_now(app),
            )
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        return JournalEntryResponse(item=tracked.to_dict())

    @app.delete("/journal/entries/{entry_id}")
    async def delete_entry(entry_id: str, user_id: Optional[str] = Query(default=None)) -> Dict[str, Any]:
        session = await sessions(app).get(clean_user_id(user_id))
        removed = await session.delete_entry(entry_id)
        return {"ok": True, "entry_id": entry_id, "removed": removed}
