
from __future__ import annotations
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence
from .models import Bucket
from .timeutil import resolve_now, local_date, round_half_up

# Fixed-cardinality day series for charts. The x-axis is always exactly
# `window_days` days ending today; empty days hold None so the chart can
# bridge gaps instead of guessing its domain.

# value_key -> decimals of the field's natural scale
VALUE_PRECISION: Dict[str, int] = {
    "intensity": 1,  # 0..10
    "score": 0,      # 0..100
}


def _round_value(value: float, digits: int):
    r = round_half_up(value, digits)
    return int(r) if digits == 0 else r


def compute_series(records: Sequence, value_key: str, window_days: int, now: Optional[datetime] = None) -> List[Bucket]:
    if value_key not in VALUE_PRECISION:
        raise ValueError(f"unknown value_key {value_key!r}; expected one of {sorted(VALUE_PRECISION)}")
    if not isinstance(window_days, int) or window_days < 1:
        raise ValueError(f"window_days must be >= 1, got {window_days!r}")
    now = resolve_now(now)
    today = now.date()
    digits = VALUE_PRECISION[value_key]

    by_day: Dict[str, List[float]] = defaultdict(list)
    for r in records:
        by_day[local_date(r.timestamp, now).isoformat()].append(float(getattr(r, value_key)))

    out: List[Bucket] = []
    for back in range(window_days - 1, -1, -1):
        key = (today - timedelta(days=back)).isoformat()
        vals = by_day.get(key)
        value = _round_value(sum(vals) / len(vals), digits) if vals else None
        out.append(Bucket(date_key=key, value=value))
    return out
