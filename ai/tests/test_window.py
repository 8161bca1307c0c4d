"""Tests for window parsing and calendar/rolling filtering."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from factories import NOW, entry
from wellness_engine.models import WindowSpec
from wellness_engine.window import filter_by_window, parse_window


def _ids(records):
    return [r.id for r in records]


def test_parse_window_forms():
    assert parse_window("week") == WindowSpec.calendar("week")
    assert parse_window(" Month ") == WindowSpec.calendar("month")
    assert parse_window(None) == WindowSpec.calendar("week")
    assert parse_window("rolling", days=30) == WindowSpec.rolling(30)
    assert parse_window("90d") == WindowSpec.rolling(90)


@pytest.mark.parametrize("value,days", [("fortnight", None), ("rolling", None), ("0d", None), ("rolling", 0)])
def test_parse_window_rejects(value, days):
    with pytest.raises(ValueError):
        parse_window(value, days)


def test_window_spec_validation():
    with pytest.raises(ValueError):
        WindowSpec(kind="calendar", unit="decade")
    with pytest.raises(ValueError):
        WindowSpec.rolling(0)
    with pytest.raises(ValueError):
        WindowSpec(kind="sliding")


def test_bucket_counts():
    today = NOW.date()
    assert WindowSpec.calendar("day").days(today) == 1
    assert WindowSpec.calendar("week").days(today) == 7
    assert WindowSpec.calendar("month").days(today) == 15
    assert WindowSpec.calendar("year").days(today) == 136
    assert WindowSpec.rolling(30).days(today) == 30


def test_day_window_midnight_edges():
    recs = [
        entry(rid="midnight", days_ago=0, hour=0),
        entry(rid="late-yesterday", days_ago=1, hour=23),
    ]
    got = filter_by_window(recs, WindowSpec.calendar("day"), NOW)
    assert _ids(got) == ["midnight"]


def test_local_date_uses_now_timezone():
    # 01:00 at +02:00 is still the previous day in UTC
    ts = datetime(2024, 5, 15, 1, 0, tzinfo=timezone(timedelta(hours=2)))
    rec = entry(rid="x")
    rec.timestamp = ts
    assert filter_by_window([rec], WindowSpec.calendar("day"), NOW) == []
    assert _ids(filter_by_window([rec], WindowSpec.rolling(2), NOW)) == ["x"]


def test_week_is_last_seven_days_inclusive():
    recs = [entry(rid=str(d), days_ago=d) for d in range(0, 9)]
    got = filter_by_window(recs, WindowSpec.calendar("week"), NOW)
    assert _ids(got) == ["0", "1", "2", "3", "4", "5", "6"]


def test_rolling_window_edges():
    recs = [entry(rid=str(d), days_ago=d) for d in (0, 29, 30)]
    assert _ids(filter_by_window(recs, WindowSpec.rolling(30), NOW)) == ["0", "29"]


def test_future_records_excluded_from_rolling_but_not_month():
    tomorrow = entry(rid="tomorrow", days_ago=-1)
    assert filter_by_window([tomorrow], WindowSpec.calendar("week"), NOW) == []
    assert filter_by_window([tomorrow], WindowSpec.rolling(7), NOW) == []
    assert _ids(filter_by_window([tomorrow], WindowSpec.calendar("month"), NOW)) == ["tomorrow"]


def test_month_and_year():
    recs = [
        entry(rid="may-1", days_ago=14),
        entry(rid="april-30", days_ago=15),
        entry(rid="last-year", days_ago=140),
    ]
    assert _ids(filter_by_window(recs, WindowSpec.calendar("month"), NOW)) == ["may-1"]
    assert _ids(filter_by_window(recs, WindowSpec.calendar("year"), NOW)) == ["may-1", "april-30"]


def test_input_order_is_preserved():
    recs = [entry(rid="b", days_ago=2), entry(rid="a", days_ago=0), entry(rid="c", days_ago=1)]
    assert _ids(filter_by_window(recs, WindowSpec.calendar("week"), NOW)) == ["b", "a", "c"]


def test_bounds():
    today = date(2024, 2, 10)
    assert WindowSpec.calendar("month").bounds(today) == (date(2024, 2, 1), date(2024, 2, 29))
    assert WindowSpec.calendar("year").bounds(today) == (date(2024, 1, 1), date(2024, 12, 31))
