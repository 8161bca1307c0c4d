
from __future__ import annotations
import os
from datetime import date, datetime, timezone, tzinfo
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

# Local-time helpers shared by the window filter, series padder and streak.
# Every public entry point takes an optional `now`; callers freeze it in tests.
#
# "Local" is a named zone, not a fixed offset, so dates stay right across
# daylight-saving changes. Resolution order: WELLNESS_TZ, TZ, /etc/localtime, UTC.

_LOCALTIME_FILE = "/etc/localtime"


def _resolve_zone() -> tzinfo:
    for name in (os.getenv("WELLNESS_TZ"), os.getenv("TZ")):
        name = (name or "").strip().lstrip(":")
        if not name:
            continue
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            continue
    try:
        with open(_LOCALTIME_FILE, "rb") as f:
            return ZoneInfo.from_file(f, key="localtime")
    except (OSError, ValueError):
        return timezone.utc


LOCAL_TZ: tzinfo = _resolve_zone()


def now_local() -> datetime:
    return datetime.now(LOCAL_TZ)


def resolve_now(now: Optional[datetime]) -> datetime:
    """Aware `now`. Naive input is local; a bare offset matching the local
    zone at that instant (e.g. from ``datetime.now().astimezone()``) is
    upgraded to the zone itself."""
    if now is None:
        return now_local()
    if now.tzinfo is None:
        return now.replace(tzinfo=LOCAL_TZ)
    if isinstance(now.tzinfo, timezone) and now.tzinfo is not timezone.utc:
        local = now.astimezone(LOCAL_TZ)
        if local.utcoffset() == now.utcoffset():
            return local
    return now


def local_date(ts: datetime, now: datetime) -> date:
    """Calendar date of `ts` in the timezone of `now` (midnight truncation)."""
    return ts.astimezone(now.tzinfo).date()


def parse_timestamp(value: Any) -> Optional[datetime]:
    """ISO-8601 string / datetime -> aware datetime. None when unparsable."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        # fromisoformat on older interpreters rejects the trailing Z
        if s.endswith("Z") or s.endswith("z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=LOCAL_TZ)
    return dt


def round_half_up(value: float, digits: int = 1) -> float:
    q = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))
