# -*- coding: utf-8 -*-
"""
Reports API
-----------
- GET /reports/summary    : WellnessReport (mode=today|history, days=7|30|90)
- GET /reports/export.csv : the same report as a CSV download
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import Response

from wellness_engine import WellnessReport, build_report, export_csv

from .deps import clean_user_id, clock_now, load_records
from .observability import log_event

logger = logging.getLogger("api_reports")


def register_report_routes(app: FastAPI) -> None:
    """Register /reports/* routes."""

    async def _build(user_id: Optional[str], mode: str, days: int, refresh: bool) -> WellnessReport:
        uid = clean_user_id(user_id)
        entries, assessments = await load_records(app, uid, refresh)
        try:
            return build_report(entries, assessments, mode=mode, days=days, now=clock_now(app))
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))

    @app.get("/reports/summary")
    async def summary(
        user_id: Optional[str] = Query(default=None),
        mode: str = Query(default="history", description="today | history"),
        days: int = Query(default=30, description="7 | 30 | 90 (history only)"),
        refresh: bool = Query(default=False),
    ) -> Dict[str, Any]:
        report = await _build(user_id, mode, days, refresh)
        return report.to_dict()

    @app.get("/reports/export.csv")
    async def export(
        user_id: Optional[str] = Query(default=None),
        mode: str = Query(default="history"),
        days: int = Query(default=30),
        refresh: bool = Query(default=False),
    ) -> Response:
        report = await _build(user_id, mode, days, refresh)
        body = export_csv(report)
        filename = f"wellness-report-{report.generated_at[:10]}.csv"
        log_event(logger, "report_exported", user_id=clean_user_id(user_id), mode=mode, period=report.period, bytes=len(body))
        return Response(
            content=body,
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
