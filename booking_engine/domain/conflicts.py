from datetime import datetime

from booking_engine.domain.entities import Appointment
from booking_engine.domain.ports import AppointmentRepository
from booking_engine.domain.timeutils import add_minutes


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Strict overlap of half-open intervals [a_start, a_end) and [b_start, b_end)."""
    return a_start < b_end and b_start < a_end


def blocks(appointment: Appointment, start: datetime, end: datetime, buffer_minutes: int) -> bool:
    """True when a live appointment's buffer-expanded interval intersects [start, end)."""
    if appointment.is_terminal:
        return False
    return overlaps(
        start,
        end,
        add_minutes(appointment.start, -buffer_minutes),
        add_minutes(appointment.end, buffer_minutes),
    )


async def find_conflicts(
    schedule_id: str,
    candidate_start: datetime,
    candidate_end: datetime,
    buffer_minutes: int,
    repo: AppointmentRepository,
    exclude_id: str | None = None,
) -> list[Appointment]:
    rows = await repo.find_overlap(
        schedule_id,
        add_minutes(candidate_start, -buffer_minutes),
        add_minutes(candidate_end, buffer_minutes),
    )
    return [a for a in rows if not a.is_terminal and a.id != exclude_id]


async def has_conflict(
    schedule_id: str,
    candidate_start: datetime,
    candidate_end: datetime,
    buffer_minutes: int,
    repo: AppointmentRepository,
    exclude_id: str | None = None,
) -> bool:
    """Whether [candidate_start, candidate_end) collides with a live appointment.

    The candidate is widened by the buffer on both sides before asking the
    repository for raw intersections. ``exclude_id`` skips one appointment,
    used when rescheduling so the booking does not collide with itself.
    """
    conflicts = await find_conflicts(
        schedule_id, candidate_start, candidate_end, buffer_minutes, repo, exclude_id=exclude_id
    )
    return bool(conflicts)
