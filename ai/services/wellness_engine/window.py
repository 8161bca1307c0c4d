
from __future__ import annotations
import re
from datetime import datetime
from typing import List, Optional, Sequence, TypeVar
from .models import WindowSpec, CALENDAR_UNITS
from .timeutil import resolve_now, local_date

T = TypeVar("T")

_RE_ROLLING = re.compile(r"^(\d{1,4})\s*d$")


def parse_window(value: Optional[str], days: Optional[int] = None) -> WindowSpec:
    """Parse 'day'/'week'/'month'/'year', 'rolling' (+days) or '30d'."""
    s = str(value or "").strip().lower()
    if not s:
        return WindowSpec.calendar("week")
    if s in CALENDAR_UNITS:
        return WindowSpec.calendar(s)
    if s == "rolling":
        if days is None:
            raise ValueError("rolling window requires days")
        return WindowSpec.rolling(int(days))
    m = _RE_ROLLING.match(s)
    if m:
        return WindowSpec.rolling(int(m.group(1)))
    raise ValueError(f"invalid window {value!r}; use day/week/month/year, rolling or <N>d")


def in_window(ts: datetime, window: WindowSpec, now: datetime) -> bool:
    # month/year bounds span the whole calendar unit, so same-month and
    # same-year matching falls out of the range check
    first, last = window.bounds(now.date())
    return first <= local_date(ts, now) <= last


def filter_by_window(records: Sequence[T], window: WindowSpec, now: Optional[datetime] = None) -> List[T]:
    """Records whose local calendar date falls in the window (both ends inclusive)."""
    now = resolve_now(now)
    return [r for r in records if in_window(r.timestamp, window, now)]
