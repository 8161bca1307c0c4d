# -*- coding: utf-8 -*-
"""
Settings API
------------
- PUT /settings : publish theme / username changes on the settings bus
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from .deps import clean_user_id, settings_bus
from .settings_bus import SettingsEvent

logger = logging.getLogger("api_settings")


class SettingsUpdate(BaseModel):
    user_id: Optional[str] = Field(default=None)
    theme: Optional[str] = Field(default=None, description="Color theme name")
    username: Optional[str] = Field(default=None, description="Display name")


class SettingsUpdateResponse(BaseModel):
    published: List[str] = Field(default_factory=list)
    delivered: int = 0
    current: Dict[str, Any] = Field(default_factory=dict)


def register_settings_routes(app: FastAPI) -> None:
    """Register /settings routes."""

    @app.put("/settings", response_model=SettingsUpdateResponse)
    async def update_settings(req: SettingsUpdate) -> SettingsUpdateResponse:
        uid = clean_user_id(req.user_id)
        changes = [(k, v) for k, v in (("theme", req.theme), ("username", req.username)) if v is not None]
        if not changes:
            raise HTTPException(status_code=400, detail="nothing to update")
        try:
            events = [SettingsEvent(key=k, value=v.strip(), user_id=uid) for k, v in changes]
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))

        bus = settings_bus(app)
        delivered = 0
        for ev in events:
            delivered += bus.publish(ev)
        return SettingsUpdateResponse(
            published=[ev.key for ev in events],
            delivered=delivered,
            current=bus.current(uid),
        )
