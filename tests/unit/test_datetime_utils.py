"""Tests for UTC and calendar-day helpers."""

from datetime import UTC, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from app.shared.utils.datetime import (
    ensure_utc,
    format_short_date,
    is_same_calendar_day,
    parse_iso_datetime,
    utc_now,
)


def test_utc_now_is_aware() -> None:
    assert utc_now().tzinfo is UTC


def test_ensure_utc() -> None:
    naive = datetime(2026, 6, 8, 9, 0)
    assert ensure_utc(naive) == datetime(2026, 6, 8, 9, 0, tzinfo=UTC)
    plus_two = datetime(2026, 6, 8, 11, 0, tzinfo=timezone(timedelta(hours=2)))
    assert ensure_utc(plus_two) == datetime(2026, 6, 8, 9, 0, tzinfo=UTC)
    assert ensure_utc(None) is None


def test_same_calendar_day_ignores_time_of_day() -> None:
    morning = datetime(2026, 6, 8, 0, 5, tzinfo=UTC)
    night = datetime(2026, 6, 8, 23, 55, tzinfo=UTC)
    assert is_same_calendar_day(morning, night, UTC)
    assert not is_same_calendar_day(morning, night + timedelta(minutes=10), UTC)


def test_same_calendar_day_depends_on_timezone() -> None:
    a = datetime(2026, 6, 8, 23, 30, tzinfo=UTC)
    b = datetime(2026, 6, 9, 0, 30, tzinfo=UTC)
    assert not is_same_calendar_day(a, b, UTC)
    assert is_same_calendar_day(a, b, ZoneInfo("America/Los_Angeles"))


def test_format_short_date() -> None:
    due = datetime(2026, 6, 10, 2, 0, tzinfo=UTC)
    assert format_short_date(due, UTC) == "6/10/2026"
    assert format_short_date(due, ZoneInfo("America/New_York")) == "6/9/2026"


def test_parse_iso_datetime_accepts_z_suffix() -> None:
    assert parse_iso_datetime("2026-06-10T17:00:00Z") == datetime(2026, 6, 10, 17, tzinfo=UTC)
    assert parse_iso_datetime("2026-06-10T17:00:00") == datetime(2026, 6, 10, 17, tzinfo=UTC)
