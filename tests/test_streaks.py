"""Tests for consecutive-day streak counting."""
from datetime import date, datetime, timedelta

from lifecycle_engine.domain.streaks import calculate_streak, to_calendar_date

TODAY = date(2025, 3, 7)


def days_ago(n):
    return TODAY - timedelta(days=n)


def test_streak_stops_at_first_gap():
    dates = [days_ago(0), days_ago(1), days_ago(2), days_ago(3), days_ago(6)]
    assert calculate_streak(dates, today=TODAY) == 4


def test_streak_is_zero_without_a_log_today():
    dates = [days_ago(1), days_ago(2)]
    assert calculate_streak(dates, today=TODAY) == 0


def test_unordered_and_duplicate_timestamps_collapse_to_days():
    dates = [
        datetime(2025, 3, 6, 20, 15),
        datetime(2025, 3, 7, 8, 0),
        datetime(2025, 3, 7, 13, 30),
        "2025-03-05T07:45:00Z",
        "2025-03-06",
    ]
    assert calculate_streak(dates, today=TODAY) == 3


def test_empty_input():
    assert calculate_streak([], today=TODAY) == 0
    assert calculate_streak([None], today=TODAY) == 0


def test_future_dated_log_breaks_the_walk():
    dates = [TODAY + timedelta(days=1), TODAY, days_ago(1)]
    assert calculate_streak(dates, today=TODAY) == 0


def test_to_calendar_date_handles_all_shapes():
    assert to_calendar_date("2025-03-07T23:59:59+00:00") == TODAY
    assert to_calendar_date(datetime(2025, 3, 7, 1, 2)) == TODAY
    assert to_calendar_date(TODAY) == TODAY
