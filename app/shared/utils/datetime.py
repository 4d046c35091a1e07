"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the system should be timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().
Calendar-day questions ("is it due today?") are answered in an explicit
timezone, never in the server's local one.
"""

from datetime import UTC, date, datetime, tzinfo


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Use this instead of:
        - datetime.now() - naive, uses local timezone
        - datetime.utcnow() - naive, deprecated in Python 3.12

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Use at repository/persistence boundaries to normalize datetimes
    (SQLite returns naive values even for timezone-aware columns).
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def calendar_date(dt: datetime, tz: tzinfo) -> date:
    """Return the calendar day of dt as seen in tz (naive dt is treated as UTC)."""
    aware = ensure_utc(dt)
    assert aware is not None
    return aware.astimezone(tz).date()


def is_same_calendar_day(a: datetime, b: datetime, tz: tzinfo) -> bool:
    """True when a and b fall on the same calendar day in tz; time of day is ignored."""
    return calendar_date(a, tz) == calendar_date(b, tz)


def format_short_date(dt: datetime, tz: tzinfo) -> str:
    """Format as M/D/YYYY in tz (e.g. 6/10/2025), the en-US short date form."""
    d = calendar_date(dt, tz)
    return f"{d.month}/{d.day}/{d.year}"


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 string (accepts trailing 'Z') into a UTC-aware datetime."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    result = ensure_utc(parsed)
    assert result is not None
    return result
