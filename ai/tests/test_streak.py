"""Tests for the engagement streak and the current-week view."""

from __future__ import annotations

from factories import NOW, entry
from wellness_engine.streak import compute_streak, current_streak, week_view


def test_no_entries():
    state = compute_streak([], NOW)
    assert state.current_streak == 0
    assert len(state.last_7_days) == 7


def test_today_and_yesterday():
    assert current_streak([entry(0), entry(1)], NOW) == 2


def test_grace_day_keeps_streak_alive():
    assert current_streak([entry(1), entry(2)], NOW) == 2


def test_two_missed_days_reset():
    assert current_streak([entry(2), entry(3), entry(4)], NOW) == 0


def test_run_stops_at_first_gap():
    assert current_streak([entry(0), entry(1), entry(3), entry(4)], NOW) == 2


def test_several_entries_one_day_count_once():
    assert current_streak([entry(0, hour=8), entry(0, hour=20), entry(1)], NOW) == 2


def test_streak_is_idempotent():
    entries = [entry(d) for d in (0, 1, 2, 5)]
    assert compute_streak(entries, NOW) == compute_streak(entries, NOW)
    assert compute_streak(entries, NOW).current_streak == 3


def test_week_view_flags():
    days = week_view([entry(2)], NOW)
    assert [d.weekday for d in days] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    assert days[0].date_key == "2024-05-13"
    assert (days[0].active, days[0].missed, days[0].future) == (True, False, False)
    assert (days[1].active, days[1].missed, days[1].future) == (False, True, False)
    # today without an entry is still open
    assert (days[2].active, days[2].missed, days[2].future) == (False, False, True)
    assert all(d.future for d in days[3:])


def test_week_view_today_active():
    days = week_view([entry(0)], NOW)
    assert days[2].active and not days[2].future


def test_each_day_has_exactly_one_flag():
    for d in week_view([entry(0), entry(2), entry(9)], NOW):
        assert [d.active, d.missed, d.future].count(True) == 1
