# -*- coding: utf-8 -*-
"""local_store.py

Local JSON fallback
-------------------

Device-local rows used when the remote is unknown or unreachable. One JSON
document holds two lists::

    {"entries": [...], "assessments": [...]}

Rows keep the remote column layout (see ``wellness_engine.normalize``). A row
without ``user_id`` belongs to the device and is visible to every caller; a
row with ``user_id`` is visible to that user only.

File handling
- missing/empty file -> empty store
- corrupt file -> raw text moved aside to ``<name>.corrupt-<ts>.json`` and
  the store restarts empty
- saves are atomic (temp file in the same directory, fsync, ``os.replace``)

All methods are synchronous; the async layer calls them through
``asyncio.to_thread``.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import time
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from .observability import log_event

logger = logging.getLogger("local_store")

KINDS = ("entries", "assessments")


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _empty() -> Dict[str, List[Dict[str, Any]]]:
    return {k: [] for k in KINDS}


def save_json(path: Path, data: Any) -> None:
    path = Path(path)
    _ensure_parent(path)
    tmp = path.with_name(path.name + ".tmp")
    payload = json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False) + "\n"

    with open(tmp, "w", encoding="utf-8") as f:
        f.write(payload)
        f.flush()
        os.fsync(f.fileno())
    os.replace(tmp, path)

    try:
        os.chmod(path, 0o600)
    except OSError:
        pass


def load_json(path: Path) -> Dict[str, List[Dict[str, Any]]]:
    """Always returns a dict with both kinds present."""
    path = Path(path)
    if not path.exists():
        return _empty()

    txt = path.read_text(encoding="utf-8").strip()
    if not txt:
        return _empty()

    try:
        data = json.loads(txt)
    except json.JSONDecodeError:
        backup = path.with_suffix(f".corrupt-{int(time.time())}.json")
        backup.write_text(txt, encoding="utf-8")
        save_json(path, _empty())
        log_event(logger, "local_store_corrupt", level="warning", path=str(path), backup=str(backup))
        return _empty()

    if not isinstance(data, dict):
        return _empty()
    out = _empty()
    for k in KINDS:
        rows = data.get(k)
        if isinstance(rows, list):
            out[k] = rows
    return out


def new_local_id() -> str:
    return f"local-{uuid.uuid4().hex[:12]}"


def _assign_missing_ids(data: Dict[str, List[Any]]) -> bool:
    changed = False
    for k in KINDS:
        for row in data[k]:
            if isinstance(row, dict) and not row.get("id"):
                row["id"] = new_local_id()
                changed = True
    return changed


class LocalStore:
    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _check(self, kind: str) -> None:
        if kind not in KINDS:
            raise ValueError(f"unknown kind {kind!r}; expected one of {KINDS}")

    def list_rows(self, kind: str, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Rows visible to `user_id`. Rows stored without an id get one
        persisted here, so every listed row can be deleted by its id."""
        self._check(kind)
        with self._lock:
            data = load_json(self.path)
            if _assign_missing_ids(data):
                save_json(self.path, data)
            rows = data[kind]
        return [r for r in rows if not isinstance(r, dict) or r.get("user_id") in (None, user_id)]

    def append(self, kind: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """Store one row, assigning an id when it has none. Returns the stored row."""
        self._check(kind)
        stored = dict(row)
        if not stored.get("id"):
            stored["id"] = new_local_id()
        with self._lock:
            data = load_json(self.path)
            data[kind].append(stored)
            save_json(self.path, data)
        return stored

    def remove(self, kind: str, row_id: str) -> bool:
        self._check(kind)
        with self._lock:
            data = load_json(self.path)
            kept = [r for r in data[kind] if not (isinstance(r, dict) and str(r.get("id")) == str(row_id))]
            if len(kept) == len(data[kind]):
                return False
            data[kind] = kept
            save_json(self.path, data)
        return True
