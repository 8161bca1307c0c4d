# -*- coding: utf-8 -*-
"""
Wellness Insights API
---------------------
- GET /healthz : health check
- journal, assessments, insights, reports and settings routes (see api_*.py)

Run:
    python -m wellness_service.app
or
    uvicorn wellness_service.app:app --host 0.0.0.0 --port 8765
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .api_assessments import register_assessment_routes
from .api_insights import register_insights_routes
from .api_journal import register_journal_routes
from .api_reports import register_report_routes
from .api_settings import register_settings_routes
from .journal_session import SessionRegistry
from .local_store import LocalStore
from .observability import log_event
from .record_store import RecordStore
from .settings_bus import SettingsBus, SettingsEvent
from .supabase_client import aclose_async_client, supabase_configured

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("wellness")


def _log_settings_change(event: SettingsEvent) -> None:
    log_event(logger, "settings_changed", key=event.key, user_id=event.user_id)


def create_app(
    store: Optional[RecordStore] = None,
    bus: Optional[SettingsBus] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    app = FastAPI(title=config.APP_NAME, version="1.0.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    store = store if store is not None else RecordStore(LocalStore(config.LOCAL_STORE_PATH))
    app.state.record_store = store
    app.state.sessions = SessionRegistry(store)
    app.state.settings_bus = bus if bus is not None else SettingsBus()
    app.state.settings_bus.subscribe(_log_settings_change)
    app.state.clock = clock

    register_journal_routes(app)
    register_assessment_routes(app)
    register_insights_routes(app)
    register_report_routes(app)
    register_settings_routes(app)

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok", "app": config.APP_NAME, "remote": supabase_configured()}

    @app.on_event("shutdown")
    async def _close_http_client() -> None:
        await aclose_async_client()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.HOST, port=config.PORT)
