"""Tests for the gap-filled day series."""

from __future__ import annotations

import pytest

from factories import NOW, assessment, entry
from wellness_engine.series import compute_series


def test_length_order_and_last_bucket_is_today():
    buckets = compute_series([], "intensity", 7, NOW)
    assert len(buckets) == 7
    assert buckets[-1].date_key == "2024-05-15"
    assert buckets[0].date_key == "2024-05-09"
    assert all(b.value is None for b in buckets)


def test_gaps_are_none():
    recs = [entry(days_ago=3, intensity=4), entry(days_ago=1, intensity=9)]
    values = [b.value for b in compute_series(recs, "intensity", 7, NOW)]
    assert values == [None, None, None, 4.0, None, 9.0, None]


def test_same_day_values_are_averaged_and_rounded():
    recs = [
        entry(days_ago=0, intensity=7, hour=8),
        entry(days_ago=0, intensity=8, hour=9),
        entry(days_ago=0, intensity=8, hour=10),
    ]
    assert compute_series(recs, "intensity", 1, NOW)[0].value == 7.7


def test_half_up_rounding():
    recs = [entry(days_ago=0, intensity=7.2, hour=8), entry(days_ago=0, intensity=7.3, hour=9)]
    assert compute_series(recs, "intensity", 1, NOW)[0].value == 7.3


def test_score_series_is_integer():
    recs = [assessment(days_ago=0, score=70, hour=8), assessment(days_ago=0, score=75, hour=9)]
    (b,) = compute_series(recs, "score", 1, NOW)
    assert b.value == 73
    assert isinstance(b.value, int)


def test_records_outside_range_are_ignored():
    recs = [entry(days_ago=10, intensity=2), entry(days_ago=-1, intensity=2)]
    assert all(b.value is None for b in compute_series(recs, "intensity", 7, NOW))


def test_deterministic_for_frozen_now():
    recs = [entry(days_ago=d, intensity=d) for d in range(5)]
    assert compute_series(recs, "intensity", 30, NOW) == compute_series(recs, "intensity", 30, NOW)


@pytest.mark.parametrize("days", [0, -3])
def test_bad_window_days(days):
    with pytest.raises(ValueError):
        compute_series([], "intensity", days, NOW)


def test_unknown_value_key():
    with pytest.raises(ValueError):
        compute_series([], "mood", 7, NOW)
