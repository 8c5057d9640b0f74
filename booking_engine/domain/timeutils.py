"""Minute-of-day and calendar-day arithmetic on a single UTC timeline."""

import re
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta

from booking_engine.domain.errors import ErrorCode, SchedulingError

MINUTES_PER_DAY = 24 * 60

# ASCII digits only; str.isdigit() also admits superscripts that int() rejects
_TIME_OF_DAY = re.compile(r"(\d{1,2}):(\d{2})", re.ASCII)


def ensure_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken as UTC; aware ones are converted to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_time_of_day(hhmm: str) -> int:
    """Parse "HH:MM" (24h) into minutes since midnight. "24:00" closes a day."""
    match = _TIME_OF_DAY.fullmatch(hhmm) if isinstance(hhmm, str) else None
    if match is None:
        raise SchedulingError(ErrorCode.INVALID_TIME_FORMAT, f"Invalid time format: {hhmm!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59 or hours > 24 or (hours == 24 and minutes):
        raise SchedulingError(ErrorCode.INVALID_TIME_FORMAT, f"Invalid time format: {hhmm!r}")
    return hours * 60 + minutes


def format_time_of_day(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def minutes_of_day(dt: datetime) -> int:
    dt = ensure_utc(dt)
    return dt.hour * 60 + dt.minute


def truncate_to_day(dt: datetime) -> datetime:
    return ensure_utc(dt).replace(hour=0, minute=0, second=0, microsecond=0)


def add_minutes(dt: datetime, minutes: int) -> datetime:
    return dt + timedelta(minutes=minutes)


def add_days(day: datetime, days: int) -> datetime:
    return day + timedelta(days=days)


def set_time_of_day(day: datetime, minutes: int) -> datetime:
    """Instant at ``minutes`` past midnight of ``day``'s calendar date."""
    return add_minutes(truncate_to_day(day), minutes)


def diff_hours(earlier: datetime, later: datetime) -> float:
    return (later - earlier).total_seconds() / 3600


def date_key(dt: datetime) -> str:
    return ensure_utc(dt).strftime("%Y-%m-%d")


def weekday_of(dt: datetime) -> int:
    """Weekday with Sunday as 0, Saturday as 6."""
    return (ensure_utc(dt).weekday() + 1) % 7


def iterate_days(start: datetime, end_exclusive: datetime) -> Iterator[datetime]:
    """Yield day starts from the day of ``start`` to the day of ``end_exclusive - 1ms``."""
    cursor = truncate_to_day(start)
    last = truncate_to_day(ensure_utc(end_exclusive) - timedelta(milliseconds=1))
    while cursor <= last:
        yield cursor
        cursor = add_days(cursor, 1)
