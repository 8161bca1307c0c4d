
from __future__ import annotations
from datetime import datetime, timedelta
from typing import List, Optional, Sequence
from .models import EntryRecord, StreakDay, StreakState
from .timeutil import resolve_now, local_date

# Engagement streak over the full (unfiltered) journal history.
#
# The streak is alive while the latest active day is today or yesterday; the
# open "yesterday" case is a grace day and adds nothing to the count itself.
# Two missed days in a row reset it to 0.

_WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def current_streak(entries: Sequence[EntryRecord], now: Optional[datetime] = None) -> int:
    now = resolve_now(now)
    today = now.date()
    days = sorted({local_date(e.timestamp, now) for e in entries}, reverse=True)
    if not days:
        return 0
    if days[0] != today and days[0] != today - timedelta(days=1):
        return 0
    streak = 1
    for prev, cur in zip(days, days[1:]):
        if prev - cur == timedelta(days=1):
            streak += 1
        else:
            break
    return streak


def week_view(entries: Sequence[EntryRecord], now: Optional[datetime] = None) -> List[StreakDay]:
    """Monday..Sunday of the current ISO week; each day is exactly one of
    active / missed / future. Today without an entry counts as future (still open)."""
    now = resolve_now(now)
    today = now.date()
    active_days = {local_date(e.timestamp, now) for e in entries}
    monday = today - timedelta(days=today.weekday())
    out: List[StreakDay] = []
    for i in range(7):
        d = monday + timedelta(days=i)
        active = d in active_days
        out.append(StreakDay(
            date_key=d.isoformat(),
            weekday=_WEEKDAYS[i],
            active=active,
            missed=(not active) and d < today,
            future=(not active) and d >= today,
        ))
    return out


def compute_streak(entries: Sequence[EntryRecord], now: Optional[datetime] = None) -> StreakState:
    now = resolve_now(now)
    return StreakState(current_streak=current_streak(entries, now), last_7_days=week_view(entries, now))
