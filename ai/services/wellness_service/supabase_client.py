# -*- coding: utf-8 -*-
"""supabase_client.py

Shared Supabase HTTP client
---------------------------

What this module provides
  - A single, lazily-initialized ``httpx.AsyncClient`` (connection pooled)
  - Small helpers for PostgREST table calls using the service_role key

Notes
  - The client is kept open for the process lifetime; ``app.py`` closes it
    on shutdown via ``aclose_async_client``.
  - ``ensure_supabase_config`` raises RuntimeError when the remote is not
    configured. Callers treat that like any other remote failure.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from . import config

logger = logging.getLogger("supabase_client")


def supabase_configured() -> bool:
    return bool(config.SUPABASE_URL and config.SUPABASE_SERVICE_ROLE_KEY)


def ensure_supabase_config() -> None:
    if not supabase_configured():
        raise RuntimeError(
            "Supabase configuration missing: SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY"
        )


# --- Client singleton ---
_client: Optional[httpx.AsyncClient] = None
_client_lock = asyncio.Lock()


def _build_limits() -> httpx.Limits:
    return httpx.Limits(
        max_connections=max(1, config.SUPABASE_HTTP_MAX_CONNECTIONS),
        max_keepalive_connections=max(1, config.SUPABASE_HTTP_MAX_KEEPALIVE_CONNECTIONS),
    )


def _build_timeout() -> httpx.Timeout:
    t = config.SUPABASE_HTTP_TIMEOUT_SECONDS
    if t <= 0:
        t = 8.0
    return httpx.Timeout(t)


async def get_async_client() -> httpx.AsyncClient:
    """Return a shared AsyncClient (connection pooled)."""

    global _client
    if _client is not None:
        return _client

    async with _client_lock:
        if _client is None:
            _client = httpx.AsyncClient(
                timeout=_build_timeout(),
                limits=_build_limits(),
            )
        return _client


async def aclose_async_client() -> None:
    global _client
    if _client is None:
        return
    try:
        await _client.aclose()
    finally:
        _client = None


# --- Headers ---


def sb_service_role_headers_json(*, prefer: Optional[str] = None) -> Dict[str, str]:
    ensure_supabase_config()
    h = {
        "apikey": config.SUPABASE_SERVICE_ROLE_KEY,
        "Authorization": f"Bearer {config.SUPABASE_SERVICE_ROLE_KEY}",
        "Content-Type": "application/json",
    }
    if prefer:
        h["Prefer"] = prefer
    return h


def table_path(table: str) -> str:
    t = str(table or "").strip()
    if not t:
        raise ValueError("table is required")
    return f"/rest/v1/{t}"


# --- Core request helpers ---


async def sb_request(
    method: str,
    path: str,
    *,
    params: Optional[Dict[str, str]] = None,
    json: Any = None,
    prefer: Optional[str] = None,
    timeout: Optional[float] = None,
) -> httpx.Response:
    """Send a request to Supabase (base URL + path).

    ``path`` should start with ``/`` (e.g. ``/rest/v1/user_entries``).
    """

    ensure_supabase_config()
    p = str(path or "").strip()
    if not p.startswith("/"):
        p = "/" + p
    url = f"{config.SUPABASE_URL}{p}"

    client = await get_async_client()
    kwargs: Dict[str, Any] = {}
    if timeout is not None:
        kwargs["timeout"] = timeout
    return await client.request(
        method=str(method or "GET").upper(),
        url=url,
        headers=sb_service_role_headers_json(prefer=prefer),
        params=params,
        json=json,
        **kwargs,
    )


async def sb_get(
    path: str,
    *,
    params: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> httpx.Response:
    return await sb_request("GET", path, params=params, timeout=timeout)


async def sb_post(
    path: str,
    *,
    json: Any,
    prefer: Optional[str] = None,
    timeout: Optional[float] = None,
) -> httpx.Response:
    return await sb_request("POST", path, json=json, prefer=prefer, timeout=timeout)


async def sb_delete(
    path: str,
    *,
    params: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> httpx.Response:
    return await sb_request("DELETE", path, params=params, timeout=timeout)


def raise_for_supabase(resp: httpx.Response, what: str) -> None:
    """Log and raise on a non-2xx PostgREST response."""
    if resp.status_code >= 300:
        logger.error("Supabase %s failed: %s %s", what, resp.status_code, resp.text[:800])
        raise RuntimeError(f"Supabase {what} failed: status={resp.status_code}")
