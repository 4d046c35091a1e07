"""Shared utilities: datetime and generators."""

from app.shared.utils.datetime import (
    calendar_date,
    ensure_utc,
    format_short_date,
    is_same_calendar_day,
    parse_iso_datetime,
    utc_now,
)
from app.shared.utils.generators import generate_cuid, stable_id

__all__ = [
    "generate_cuid",
    "stable_id",
    "utc_now",
    "ensure_utc",
    "calendar_date",
    "is_same_calendar_day",
    "format_short_date",
    "parse_iso_datetime",
]
