# -*- coding: utf-8 -*-
"""
Assessments API
---------------
- POST /assessments : save one clinical assessment result

The remote table is tried first when ``user_id`` is given; any failure falls
back to the local store. The response says where the row landed.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from wellness_engine import AssessmentRecord
from wellness_engine.timeutil import parse_timestamp

from .deps import clean_user_id, clock_now, record_store
from .local_store import new_local_id
from .observability import log_event

logger = logging.getLogger("api_assessments")


class AssessmentCreate(BaseModel):
    user_id: Optional[str] = Field(default=None, description="Owner; omit to save locally")
    test_id: Optional[str] = Field(default=None, description="Questionnaire id (e.g. phq9)")
    test_name: str = Field(default="Unknown Test", description="Display name")
    category: str = Field(default="General", description="Assessment category")
    score: float = Field(..., ge=0, le=100, description="Result 0..100")
    taken_at: Optional[str] = Field(default=None, description="ISO-8601; defaults to now")


class AssessmentResponse(BaseModel):
    assessment: Dict[str, Any]
    stored: str = Field(..., description="remote | local")


def register_assessment_routes(app: FastAPI) -> None:
    """Register /assessments routes."""

    @app.post("/assessments", response_model=AssessmentResponse)
    async def save_assessment(req: AssessmentCreate) -> AssessmentResponse:
        ts: Optional[datetime] = clock_now(app)
        if req.taken_at:
            ts = parse_timestamp(req.taken_at)
            if ts is None:
                raise HTTPException(status_code=400, detail=f"invalid taken_at {req.taken_at!r}")

        uid = clean_user_id(req.user_id)
        record = AssessmentRecord(
            id=new_local_id(),
            test_name=req.test_name.strip() or "Unknown Test",
            category=req.category.strip() or "General",
            score=float(req.score),
            timestamp=ts,
            test_id=req.test_id,
        )
        saved, stored = await record_store(app).insert_assessment(record, uid)
        log_event(logger, "assessment_saved", user_id=uid, stored=stored, test_id=req.test_id)
        return AssessmentResponse(assessment=saved.to_dict(), stored=stored)
