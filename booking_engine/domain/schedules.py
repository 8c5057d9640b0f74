"""Creating and reading schedules."""

import logging
from datetime import date

from booking_engine.domain.entities import DailyWindow, Schedule, ScheduleException, UserRole, WeeklyTemplateItem
from booking_engine.domain.errors import ErrorCode, SchedulingError
from booking_engine.domain.lifecycle import load_schedule
from booking_engine.domain.ports import Deps
from booking_engine.domain.timeutils import ensure_utc, format_time_of_day, parse_time_of_day

logger = logging.getLogger(__name__)


def normalize_window(window: DailyWindow) -> DailyWindow:
    """Validate a window and rewrite it as zero-padded "HH:MM".

    Raises INVALID_TIME_FORMAT for unparsable times and INVALID_SCHEDULE
    when the window is empty or reversed.
    """
    start = parse_time_of_day(window.start)
    end = parse_time_of_day(window.end)
    if start >= end:
        raise SchedulingError(ErrorCode.INVALID_SCHEDULE, f"empty window {window.start}-{window.end}")
    return DailyWindow(start=format_time_of_day(start), end=format_time_of_day(end))


def _normalize_date(value: str) -> str:
    try:
        parsed = date.fromisoformat(value)
    except (TypeError, ValueError):
        raise SchedulingError(ErrorCode.INVALID_SCHEDULE, f"bad exception date {value!r}") from None
    return parsed.isoformat()


def _normalize_template(items: list[WeeklyTemplateItem]) -> list[WeeklyTemplateItem]:
    out = []
    for item in items:
        if not 0 <= item.weekday <= 6:
            raise SchedulingError(ErrorCode.INVALID_SCHEDULE, f"weekday {item.weekday}")
        out.append(WeeklyTemplateItem(weekday=item.weekday, windows=[normalize_window(w) for w in item.windows]))
    return out


def _normalize_exceptions(exceptions: list[ScheduleException]) -> list[ScheduleException]:
    out: list[ScheduleException] = []
    seen: set[str] = set()
    for exc in exceptions:
        key = _normalize_date(exc.date)
        if key in seen:
            raise SchedulingError(ErrorCode.INVALID_SCHEDULE, f"duplicate exception for {key}")
        seen.add(key)
        out.append(
            ScheduleException(
                date=key,
                available=exc.available,
                windows=[normalize_window(w) for w in exc.windows],
            )
        )
    return out


async def create_schedule(
    professional_id: str,
    weekly_template: list[WeeklyTemplateItem],
    deps: Deps,
    exceptions: list[ScheduleException] | None = None,
    buffer_minutes: int = 0,
    timezone: str = "UTC",
) -> Schedule:
    if buffer_minutes < 0:
        raise SchedulingError(ErrorCode.INVALID_SCHEDULE, f"buffer {buffer_minutes}")
    template = _normalize_template(weekly_template)
    normalized_exceptions = _normalize_exceptions(exceptions or [])
    now = ensure_utc(deps.clock.now())
    schedule = Schedule(
        id=deps.ids.next(),
        professional_id=professional_id,
        weekly_template=template,
        exceptions=normalized_exceptions,
        buffer_minutes=buffer_minutes,
        timezone=timezone,
        created_at=now,
        updated_at=now,
    )
    await deps.schedules.create(schedule)
    logger.info("Schedule %s created for professional %s", schedule.id, professional_id)
    return schedule


async def get_schedule(schedule_id: str, actor_id: str, actor_role: UserRole, deps: Deps) -> Schedule:
    """Only the owning professional and staff may read a schedule."""
    schedule = await load_schedule(schedule_id, deps)
    if not (UserRole(actor_role).is_privileged or schedule.professional_id == actor_id):
        raise SchedulingError(ErrorCode.FORBIDDEN, f"actor {actor_id} on schedule {schedule_id}")
    return schedule
