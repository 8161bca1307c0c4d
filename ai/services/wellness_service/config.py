# -*- coding: utf-8 -*-
"""config.py

Environment configuration
-------------------------

All settings are read from environment variables at import time. Helpers are
lenient: an unparsable value falls back to the default instead of raising.

Main variables
- SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY
- WELLNESS_ENTRIES_TABLE (default: user_entries)
- WELLNESS_ASSESSMENTS_TABLE (default: assessments)
- WELLNESS_LOCAL_STORE_PATH (default: ~/.wellness/local_store.json)
- WELLNESS_APP_NAME / WELLNESS_HOST / WELLNESS_PORT / WELLNESS_CORS_ORIGINS
- WELLNESS_TZ (IANA zone for local dates; read by wellness_engine.timeutil, falls back to TZ)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List


def _env_truthy(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in ("1", "true", "yes", "y", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(str(raw).strip())
    except ValueError:
        return default


def _env_str(name: str, default: str) -> str:
    return (os.getenv(name) or default).strip() or default


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default) or default
    return [x.strip() for x in raw.split(",") if x.strip()]


# --- Supabase ---
SUPABASE_URL = (os.getenv("SUPABASE_URL") or "").rstrip("/")
SUPABASE_SERVICE_ROLE_KEY = (os.getenv("SUPABASE_SERVICE_ROLE_KEY") or "").strip()
SUPABASE_HTTP_TIMEOUT_SECONDS = _env_float("SUPABASE_HTTP_TIMEOUT_SECONDS", 8.0)
SUPABASE_HTTP_MAX_CONNECTIONS = _env_int("SUPABASE_HTTP_MAX_CONNECTIONS", 100)
SUPABASE_HTTP_MAX_KEEPALIVE_CONNECTIONS = _env_int("SUPABASE_HTTP_MAX_KEEPALIVE_CONNECTIONS", 20)

ENTRIES_TABLE = _env_str("WELLNESS_ENTRIES_TABLE", "user_entries")
ASSESSMENTS_TABLE = _env_str("WELLNESS_ASSESSMENTS_TABLE", "assessments")

# --- Local fallback ---
LOCAL_STORE_PATH = Path(
    os.path.expanduser(_env_str("WELLNESS_LOCAL_STORE_PATH", "~/.wellness/local_store.json"))
)

# --- App ---
APP_NAME = _env_str("WELLNESS_APP_NAME", "Wellness Insights")
HOST = _env_str("WELLNESS_HOST", "0.0.0.0")
PORT = _env_int("WELLNESS_PORT", 8765)
ALLOWED_ORIGINS = _env_list("WELLNESS_CORS_ORIGINS", "*") or ["*"]

# --- Logging ---
OBS_LOG_JSON = _env_truthy("OBS_LOG_JSON", True)
