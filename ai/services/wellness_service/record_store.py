# -*- coding: utf-8 -*-
"""record_store.py

Record sources for the insights views
-------------------------------------

Two backends feed the engine:

- ``RemoteStore``: Supabase PostgREST tables (``user_entries`` / ``assessments``)
- ``LocalStore``: the device-local JSON fallback

``RecordStore`` reads both concurrently and decides what the engine sees:

- entries: remote rows when a user id is known and the remote read succeeded,
  local rows otherwise
- assessments: remote + local, always unioned (no dedup)

A failed remote read (HTTP >= 300, network error, missing config) is logged
and degrades to local data; it never fails the query.

Writes
- entries go to the remote when a user id is known, else to the local file;
  write errors propagate (the journal session records them)
- assessments try the remote first and fall back to the local file
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

import httpx

from wellness_engine import (
    AssessmentRecord,
    EntryRecord,
    assessment_to_row,
    entry_to_row,
    normalize_assessments,
    normalize_entries,
)

from . import config
from .local_store import LocalStore
from .observability import elapsed_ms, log_event, log_rejections, monotonic_ms
from .supabase_client import raise_for_supabase, sb_delete, sb_get, sb_post, table_path

logger = logging.getLogger("record_store")

# Failures that mean "remote unavailable" rather than a bug.
REMOTE_ERRORS = (httpx.HTTPError, RuntimeError, ValueError)


class RemoteStore:
    """Thin PostgREST wrapper. Every method raises on failure."""

    def __init__(self, entries_table: Optional[str] = None, assessments_table: Optional[str] = None):
        self.entries_table = entries_table or config.ENTRIES_TABLE
        self.assessments_table = assessments_table or config.ASSESSMENTS_TABLE

    def _table(self, kind: str) -> str:
        return table_path(self.entries_table if kind == "entries" else self.assessments_table)

    async def fetch(self, kind: str, user_id: str) -> List[Any]:
        resp = await sb_get(
            self._table(kind),
            params={
                "select": "*",
                "user_id": f"eq.{user_id}",
                "order": "created_at.desc",
            },
        )
        raise_for_supabase(resp, f"select {kind}")
        data = resp.json()
        if not isinstance(data, list):
            raise ValueError(f"unexpected {kind} payload: {type(data).__name__}")
        return data

    async def insert(self, kind: str, row: Dict[str, Any]) -> Dict[str, Any]:
        resp = await sb_post(self._table(kind), json=row, prefer="return=representation")
        raise_for_supabase(resp, f"insert {kind}")
        data = resp.json()
        if isinstance(data, list) and data and isinstance(data[0], dict):
            return data[0]
        if isinstance(data, dict):
            return data
        raise ValueError(f"insert {kind} returned no row")

    async def delete(self, kind: str, row_id: str, user_id: str) -> None:
        resp = await sb_delete(
            self._table(kind),
            params={"id": f"eq.{row_id}", "user_id": f"eq.{user_id}"},
        )
        raise_for_supabase(resp, f"delete {kind}")


class RecordStore:
    def __init__(self, local: LocalStore, remote: Optional[RemoteStore] = None):
        self.local = local
        self.remote = remote if remote is not None else RemoteStore()

    # ---------- reads ----------

    async def _remote_rows(self, kind: str, user_id: Optional[str]) -> Optional[List[Any]]:
        """Remote rows, or None when there is no user or the read failed."""
        if not user_id:
            return None
        t0 = monotonic_ms()
        try:
            rows = await self.remote.fetch(kind, user_id)
        except REMOTE_ERRORS as exc:
            log_event(
                logger,
                "remote_fetch_failed",
                level="warning",
                kind=kind,
                user_id=user_id,
                error=f"{type(exc).__name__}: {exc}",
                elapsed_ms=elapsed_ms(t0),
            )
            return None
        log_event(logger, "remote_fetch_ok", level="debug", kind=kind, rows=len(rows), elapsed_ms=elapsed_ms(t0))
        return rows

    async def _fetch_both(self, kind: str, user_id: Optional[str]) -> Tuple[Optional[List[Any]], List[Any]]:
        remote_rows, local_rows = await asyncio.gather(
            self._remote_rows(kind, user_id),
            asyncio.to_thread(self.local.list_rows, kind, user_id),
        )
        return remote_rows, local_rows

    async def list_entries(self, user_id: Optional[str] = None) -> List[EntryRecord]:
        remote_rows, local_rows = await self._fetch_both("entries", user_id)
        if remote_rows is not None:
            source, rows = "remote", remote_rows
        else:
            source, rows = "local", local_rows
        result = normalize_entries(rows)
        log_rejections(logger, "entries", source, result.rejected)
        return sorted(result.records, key=lambda e: e.timestamp, reverse=True)

    async def list_assessments(self, user_id: Optional[str] = None) -> List[AssessmentRecord]:
        remote_rows, local_rows = await self._fetch_both("assessments", user_id)
        remote = normalize_assessments(remote_rows or [])
        local = normalize_assessments(local_rows)
        log_rejections(logger, "assessments", "remote", remote.rejected)
        log_rejections(logger, "assessments", "local", local.rejected)
        return sorted(remote.records + local.records, key=lambda a: a.timestamp, reverse=True)

    # ---------- writes ----------

    async def insert_entry(self, entry: EntryRecord, user_id: Optional[str] = None) -> EntryRecord:
        """Persist and return the entry with its storage id."""
        row = entry_to_row(entry, user_id)
        if user_id:
            saved = await self.remote.insert("entries", row)
        else:
            saved = await asyncio.to_thread(self.local.append, "entries", row)
        return replace(entry, id=str(saved.get("id") or entry.id))

    async def delete_entry(self, entry_id: str, user_id: Optional[str] = None) -> bool:
        if user_id:
            await self.remote.delete("entries", entry_id, user_id)
            return True
        return await asyncio.to_thread(self.local.remove, "entries", entry_id)

    async def insert_assessment(
        self, assessment: AssessmentRecord, user_id: Optional[str] = None
    ) -> Tuple[AssessmentRecord, str]:
        """Returns the stored record and where it landed ("remote" | "local")."""
        if user_id:
            try:
                saved = await self.remote.insert("assessments", assessment_to_row(assessment, user_id))
                return replace(assessment, id=str(saved.get("id") or assessment.id)), "remote"
            except REMOTE_ERRORS as exc:
                log_event(
                    logger,
                    "assessment_remote_save_failed",
                    level="warning",
                    user_id=user_id,
                    error=f"{type(exc).__name__}: {exc}",
                )
        saved = await asyncio.to_thread(self.local.append, "assessments", assessment_to_row(assessment))
        return replace(assessment, id=str(saved["id"])), "local"
