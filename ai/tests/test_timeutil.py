"""Local-zone handling: dates must survive daylight-saving changes."""

from __future__ import annotations

import csv
import io
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from wellness_engine import timeutil
from wellness_engine.models import AssessmentRecord, EntryRecord
from wellness_engine.report import build_report, export_csv
from wellness_engine.series import compute_series
from wellness_engine.streak import compute_streak

NEW_YORK = ZoneInfo("America/New_York")
EDT = timezone(timedelta(hours=-4))


@pytest.fixture
def new_york(monkeypatch):
    monkeypatch.setattr(timeutil, "LOCAL_TZ", NEW_YORK)
    return NEW_YORK


def _entry(ts, rid="e"):
    return EntryRecord(id=rid, text="", timestamp=ts, emotion="Calm", intensity=5)


def _active_days(buckets):
    return [b.date_key for b in buckets if b.value is not None]


def test_winter_evening_stays_on_its_day_with_summer_clock(new_york):
    e = _entry(datetime(2026, 1, 10, 23, 30, tzinfo=NEW_YORK))
    # summer clock as a bare offset, the way datetime.now().astimezone() reports it
    now = datetime(2026, 7, 1, 12, 0, tzinfo=EDT)
    assert _active_days(compute_series([e], "intensity", 200, now)) == ["2026-01-10"]
    now = datetime(2026, 7, 1, 12, 0, tzinfo=NEW_YORK)
    assert _active_days(compute_series([e], "intensity", 200, now)) == ["2026-01-10"]


@pytest.mark.parametrize("tz", [EDT, NEW_YORK])
def test_streak_across_spring_forward(new_york, tz):
    entries = [
        _entry(datetime(2026, 3, day, 23, 30, tzinfo=NEW_YORK), rid=f"d{day}")
        for day in range(1, 10)
    ]
    now = datetime(2026, 3, 9, 23, 45, tzinfo=tz)
    assert compute_streak(entries, now).current_streak == 9


def test_naive_timestamps_use_the_zone_offset_of_their_date(new_york):
    winter = timeutil.parse_timestamp("2026-01-10T23:30:00")
    summer = timeutil.parse_timestamp("2026-07-10T23:30:00")
    assert winter.utcoffset() == timedelta(hours=-5)
    assert summer.utcoffset() == timedelta(hours=-4)


def test_resolve_now(new_york):
    assert timeutil.resolve_now(None).tzinfo is NEW_YORK
    assert timeutil.resolve_now(datetime(2026, 1, 1, 9, 0)).tzinfo is NEW_YORK
    assert timeutil.resolve_now(datetime(2026, 7, 1, 9, 0, tzinfo=EDT)).tzinfo is NEW_YORK
    utc_now = datetime(2026, 7, 1, 9, 0, tzinfo=timezone.utc)
    assert timeutil.resolve_now(utc_now) is utc_now
    # offset that is not New York's in winter stays as given
    odd = datetime(2026, 1, 1, 9, 0, tzinfo=EDT)
    assert timeutil.resolve_now(odd).tzinfo is EDT


def test_zone_from_environment(monkeypatch):
    monkeypatch.setenv("WELLNESS_TZ", "Europe/Berlin")
    assert timeutil._resolve_zone() == ZoneInfo("Europe/Berlin")
    monkeypatch.setenv("WELLNESS_TZ", "Not/A_Zone")
    monkeypatch.setenv("TZ", "Asia/Tokyo")
    assert timeutil._resolve_zone() == ZoneInfo("Asia/Tokyo")


def test_csv_times_use_the_zone_of_each_record(new_york):
    a = AssessmentRecord(
        id="a", test_name="GAD-7", category="Anxiety", score=60,
        timestamp=datetime(2026, 3, 1, 23, 30, tzinfo=NEW_YORK),
    )
    now = datetime(2026, 3, 9, 12, 0, tzinfo=EDT)
    rows = list(csv.reader(io.StringIO(export_csv(build_report([], [a], mode="history", days=30, now=now)))))
    assert ["2026-03-01", "23:30", "Assessment", "GAD-7", "60%", "Moderate", "Anxiety"] in rows
