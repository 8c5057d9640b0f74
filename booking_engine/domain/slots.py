import logging
from collections.abc import Iterable, Iterator
from datetime import datetime

from booking_engine.domain.availability import resolve_windows
from booking_engine.domain.conflicts import blocks
from booking_engine.domain.entities import Appointment, Offering, Schedule, Slot
from booking_engine.domain.lifecycle import load_bookable_offering, load_schedule
from booking_engine.domain.ports import Deps
from booking_engine.domain.timeutils import (
    add_minutes,
    ensure_utc,
    iterate_days,
    parse_time_of_day,
    set_time_of_day,
)

logger = logging.getLogger(__name__)


def _slots_for_day(
    schedule: Schedule,
    day: datetime,
    duration: int,
    range_start: datetime,
    range_end: datetime,
    existing: list[Appointment],
) -> list[Slot]:
    out: list[Slot] = []
    for window in resolve_windows(schedule, day):
        window_start = parse_time_of_day(window.start)
        window_end = parse_time_of_day(window.end)
        start_min = window_start
        # Fixed stride of one duration; the buffer only filters candidates.
        while start_min + duration <= window_end:
            slot_start = set_time_of_day(day, start_min)
            slot_end = add_minutes(slot_start, duration)
            start_min += duration
            if slot_start < range_start or slot_end > range_end:
                continue
            if any(blocks(a, slot_start, slot_end, schedule.buffer_minutes) for a in existing):
                continue
            out.append(Slot(start=slot_start, end=slot_end))
    out.sort(key=lambda s: s.start)
    return out


def generate_slots(
    schedule: Schedule,
    offering: Offering,
    range_start: datetime,
    range_end: datetime,
    existing: Iterable[Appointment] = (),
) -> Iterator[Slot]:
    """Yield free fixed-duration slots inside [range_start, range_end), in order.

    Pure: the same inputs always produce the same sequence.
    """
    range_start = ensure_utc(range_start)
    range_end = ensure_utc(range_end)
    if range_start >= range_end:
        return
    booked = list(existing)
    for day in iterate_days(range_start, range_end):
        yield from _slots_for_day(
            schedule, day, offering.duration_minutes, range_start, range_end, booked
        )


async def list_available_slots(
    schedule_id: str,
    offering_id: str,
    range_start: datetime,
    range_end: datetime,
    deps: Deps,
) -> list[Slot]:
    """Free slots for an offering on a schedule between range_start (incl.) and range_end (excl.)."""
    schedule = await load_schedule(schedule_id, deps)
    offering = await load_bookable_offering(offering_id, deps)
    range_start = ensure_utc(range_start)
    range_end = ensure_utc(range_end)
    if range_start >= range_end:
        return []
    buffer = schedule.buffer_minutes
    existing = await deps.appointments.list_by_schedule_and_range(
        schedule.id, add_minutes(range_start, -buffer), add_minutes(range_end, buffer)
    )
    slots = list(generate_slots(schedule, offering, range_start, range_end, existing))
    logger.debug(
        "Availability schedule=%s offering=%s %s..%s: %d slot(s)",
        schedule.id,
        offering.id,
        range_start.isoformat(),
        range_end.isoformat(),
        len(slots),
    )
    return slots
