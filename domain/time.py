"""
Domain time utilities (pure).

Centralized timestamp validation, parsing and serialization helpers shared by
the domain model and the repositories.

Behavior and error messages must remain consistent across the domain model.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from .errors import ValidationError


def require_utc_timestamp(name: str, value: datetime) -> None:
    """
    Enforces that stored timestamps are UTC.

    Invariants:
    - Timestamps must be timezone-aware.
    - Timestamps must have UTC offset 0.
    """

    if value.tzinfo is None or value.utcoffset() is None:
        raise ValidationError(f"{name} must be timezone-aware (UTC)")
    if value.utcoffset() != timedelta(0):
        raise ValidationError(f"{name} must be a UTC timestamp (offset 0)")


def to_iso_utc(dt: datetime, *, name: str) -> str:
    """Serialize a UTC datetime to ISO-8601 (timezone-aware, offset 0)."""

    require_utc_timestamp(name, dt)
    return dt.astimezone(timezone.utc).isoformat()


def parse_utc_datetime(value: Any) -> datetime:
    """
    Parse a Supabase timestamp into a timezone-aware UTC datetime.

    Supabase commonly returns ISO-8601 strings, sometimes with a trailing 'Z'.
    Naive values are assumed to be UTC.
    """

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise TypeError(f"Unsupported timestamp type: {type(value)!r}")

    if dt.tzinfo is None or dt.utcoffset() is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_optional_utc_datetime(value: Any) -> datetime | None:
    return parse_utc_datetime(value) if value else None


def parse_date(value: Any) -> date:
    """Parse a DATE column (or a timestamp, truncated to its UTC date)."""

    if isinstance(value, datetime):
        return parse_utc_datetime(value).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        if "T" in value or " " in value:
            return parse_utc_datetime(value).date()
        return date.fromisoformat(value)
    raise TypeError(f"Unsupported date type: {type(value)!r}")


def day_range_utc(start: date, end: date) -> tuple[datetime, datetime]:
    """
    Inclusive whole-day range [start 00:00:00, end 23:59:59.999999] in UTC.

    Raises ValidationError when end is before start.
    """

    if end < start:
        raise ValidationError("end date must be on or after start date")
    return (
        datetime.combine(start, time.min, tzinfo=timezone.utc),
        datetime.combine(end, time.max, tzinfo=timezone.utc),
    )


def month_range_utc(as_of: datetime, months_back: int = 0) -> tuple[datetime, datetime]:
    """
    Calendar month containing `as_of`, shifted back by `months_back` months.

    Returns (first instant of the month, last instant of the month) in UTC.
    """

    require_utc_timestamp("as_of", as_of)

    year, month = as_of.year, as_of.month - months_back
    while month < 1:
        month += 12
        year -= 1

    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        next_start = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        next_start = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return start, next_start - timedelta(microseconds=1)
