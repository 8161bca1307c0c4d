# -*- coding: utf-8 -*-
"""observability.py

Structured event logs
---------------------

Goals
- Make it obvious which layer dropped a record or failed a write
  (normalize rejections, remote write failures, local fallback).
- Keep the happy path quiet: one event per storage call, not per row.

Policy
- Events go through the standard ``logging`` module as single-line JSON so
  log tooling can filter on ``event``.
- Logging must never break the caller.
- Secrets (service role key, bearer tokens) are never passed as fields.

Environment
- OBS_LOG_JSON=true/false (default true)
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict

from .config import OBS_LOG_JSON


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _safe_default(o: Any) -> str:
    try:
        return str(o)
    except Exception:
        return repr(o)


def _safe_json_dumps(obj: Dict[str, Any]) -> str:
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"), default=_safe_default)


def log_event(logger: logging.Logger, event: str, *, level: str = "info", **fields: Any) -> None:
    """Write a structured event log.

    - level: info|warning|error|debug
    - event: stable identifier (e.g. entry_write_failed)
    """
    payload: Dict[str, Any] = {
        "ts": _iso_now(),
        "event": event,
        **fields,
    }

    msg = _safe_json_dumps(payload) if OBS_LOG_JSON else f"{event} {payload}"

    try:
        fn = getattr(logger, level, logger.info)
        fn(msg)
    except Exception:
        try:
            logger.info(msg)
        except Exception:
            pass


def log_rejections(logger: logging.Logger, kind: str, source: str, rejected) -> None:
    """One warning per batch listing the rows normalize dropped."""
    if not rejected:
        return
    log_event(
        logger,
        "records_rejected",
        level="warning",
        kind=kind,
        source=source,
        count=len(rejected),
        samples=[asdict(r) for r in list(rejected)[:5]],
    )


# ----------------------------
# Run context helpers
# ----------------------------

def new_run_id(prefix: str = "req") -> str:
    """Short id for correlating the events of one request."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def elapsed_ms(start_ms: float) -> int:
    try:
        return int(max(0.0, monotonic_ms() - float(start_ms)))
    except Exception:
        return 0
