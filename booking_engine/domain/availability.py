from datetime import datetime

from booking_engine.domain.entities import DailyWindow, Schedule
from booking_engine.domain.timeutils import (
    date_key,
    minutes_of_day,
    parse_time_of_day,
    truncate_to_day,
    weekday_of,
)


def resolve_windows(schedule: Schedule, day: datetime) -> list[DailyWindow]:
    """Open windows for the calendar date of ``day``.

    An exception for the date replaces the weekly template entirely: an
    unavailable exception closes the day, an available one opens exactly its
    own windows (none means closed).
    """
    exception = schedule.exception_for(date_key(day))
    if exception is not None:
        if not exception.available:
            return []
        return list(exception.windows)
    weekday = weekday_of(day)
    windows: list[DailyWindow] = []
    for item in schedule.weekly_template:
        if item.weekday == weekday:
            windows.extend(item.windows)
    return windows


def _end_minute(start: datetime, end: datetime) -> int:
    # Measured from start's midnight so an interval crossing into the next
    # day lands past 1440 and cannot fit any window.
    return int((end - truncate_to_day(start)).total_seconds() // 60)


def is_within_availability(schedule: Schedule, start: datetime, end: datetime) -> bool:
    """True when [start, end] fits inside a single resolved window of start's date."""
    windows = resolve_windows(schedule, start)
    if not windows:
        return False
    start_min = minutes_of_day(start)
    end_min = _end_minute(start, end)
    for window in windows:
        if parse_time_of_day(window.start) <= start_min and end_min <= parse_time_of_day(window.end):
            return True
    return False
