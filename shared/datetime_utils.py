"""
Date/time parsing and conversion utilities — framework-agnostic.

All stored instants are UTC. MongoDB hands back naive datetimes unless the
client is tz-aware, so every comparison goes through ``ensure_utc`` first.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional, Union

ONE_DAY = timedelta(days=1)

# Sentinel returned by compute_age for missing or implausible birth dates
AGE_UNSPECIFIED = "Not specified"
MAX_HUMAN_AGE = 120


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to a naive datetime; convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a date/time value into a timezone-aware UTC datetime.

    Accepts:
    - ``None`` → ``None``
    - ``datetime`` → normalised to UTC
    - ``date`` → midnight UTC of that day
    - ``int`` / ``float`` → Unix epoch seconds
    - ISO 8601 strings, with ``"Z"`` accepted for UTC

    Returns:
        A timezone-aware ``datetime`` in UTC, or ``None`` if *value* cannot
        be parsed.
    """
    if value is None:
        return None
    try:
        if isinstance(value, datetime):
            return ensure_utc(value)
        if isinstance(value, date):
            return datetime.combine(value, time(), tzinfo=timezone.utc)
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(int(value), tz=timezone.utc)
        raw = str(value).strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        return ensure_utc(datetime.fromisoformat(raw))
    except (ValueError, OSError, OverflowError):
        return None


def parse_time_of_day(value: str) -> time:
    """Parse ``"HH:MM"`` (or ``"HH:MM:SS"``) into a ``time``.

    Raises:
        ValueError: if *value* is not a valid time of day.
    """
    parts = [int(p) for p in value.strip().split(":")]
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time of day: {value!r}")
    return time(*parts)


def combine_date_time(day: Union[date, datetime], time_of_day: str) -> datetime:
    """Start instant of an event: the calendar day of *day* at *time_of_day* UTC."""
    if isinstance(day, datetime):
        day = ensure_utc(day).date()
    return datetime.combine(day, parse_time_of_day(time_of_day), tzinfo=timezone.utc)


def start_of_day(now: datetime) -> datetime:
    now = ensure_utc(now)
    return datetime(now.year, now.month, now.day, tzinfo=timezone.utc)


def remaining_days(expiry: Optional[datetime], now: datetime) -> int:
    """Whole days left until *expiry*, rounded up; 0 once expired."""
    expiry = ensure_utc(expiry)
    if expiry is None or expiry <= now:
        return 0
    return math.ceil((expiry - now) / ONE_DAY)


def compute_age(date_of_birth: Any, today: Optional[date] = None) -> Union[int, str]:
    """Age in completed years, or ``AGE_UNSPECIFIED`` when it cannot be trusted.

    Unparseable birth dates and ages outside ``0..MAX_HUMAN_AGE`` never raise;
    they yield the sentinel so one bad profile cannot fail a listing.
    """
    born = parse_datetime(date_of_birth) if date_of_birth else None
    if born is None:
        return AGE_UNSPECIFIED
    today = today or utc_now().date()
    born_day = born.date()
    age = today.year - born_day.year - (
        (today.month, today.day) < (born_day.month, born_day.day)
    )
    if age < 0 or age > MAX_HUMAN_AGE:
        return AGE_UNSPECIFIED
    return age
