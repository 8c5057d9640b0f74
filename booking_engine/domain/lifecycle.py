import logging
from dataclasses import replace
from datetime import datetime

from booking_engine.domain.availability import is_within_availability
from booking_engine.domain.conflicts import has_conflict
from booking_engine.domain.entities import (
    Appointment,
    AppointmentStatus,
    AuditAction,
    AuditEvent,
    Offering,
    Schedule,
    UserRole,
)
from booking_engine.domain.errors import ErrorCode, SchedulingError
from booking_engine.domain.ports import Deps
from booking_engine.domain.timeutils import add_minutes, diff_hours, ensure_utc

logger = logging.getLogger(__name__)


async def load_schedule(schedule_id: str, deps: Deps) -> Schedule:
    schedule = await deps.schedules.find_by_id(schedule_id)
    if schedule is None:
        raise SchedulingError(ErrorCode.SCHEDULE_NOT_FOUND, schedule_id)
    return schedule


async def load_bookable_offering(offering_id: str, deps: Deps) -> Offering:
    offering = await deps.offerings.find_by_id(offering_id)
    if offering is None:
        raise SchedulingError(ErrorCode.OFFERING_NOT_FOUND, offering_id)
    if not offering.is_active:
        raise SchedulingError(ErrorCode.OFFERING_INACTIVE, offering_id)
    return offering


async def _load_appointment(appointment_id: str, deps: Deps) -> Appointment:
    appointment = await deps.appointments.find_by_id(appointment_id)
    if appointment is None:
        raise SchedulingError(ErrorCode.APPOINTMENT_NOT_FOUND, appointment_id)
    return appointment


def _require_future(start: datetime, now: datetime) -> datetime:
    if not isinstance(start, datetime):
        raise SchedulingError(ErrorCode.RULE_PAST_APPOINTMENT, f"not an instant: {start!r}")
    start = ensure_utc(start)
    if start <= now:
        raise SchedulingError(ErrorCode.RULE_PAST_APPOINTMENT, start.isoformat())
    return start


def _authorize(appointment: Appointment, actor_id: str, actor_role: UserRole, denied: ErrorCode) -> None:
    """Participants and staff (ADMIN, ASSISTANT) may act on an appointment."""
    if UserRole(actor_role).is_privileged or appointment.is_participant(actor_id):
        return
    raise SchedulingError(denied, f"actor {actor_id} on appointment {appointment.id}")


def _check_cancel_window(appointment: Appointment, actor_role: UserRole, now: datetime, deps: Deps) -> None:
    if UserRole(actor_role) != UserRole.USER:
        return
    hours_until_start = diff_hours(now, appointment.start)
    if hours_until_start < deps.policy.cancel_min_hours:
        raise SchedulingError(
            ErrorCode.CANCEL_WINDOW_VIOLATION,
            f"{hours_until_start:.2f}h before start, policy requires {deps.policy.cancel_min_hours}h",
        )


def _require_live(appointment: Appointment) -> None:
    if appointment.is_terminal:
        raise SchedulingError(ErrorCode.RULE_INVALID_TRANSITION, appointment.status.value)


async def _book(
    schedule: Schedule,
    offering: Offering,
    customer_id: str,
    start: datetime,
    now: datetime,
    deps: Deps,
    notes: str | None = None,
    exclude_id: str | None = None,
) -> Appointment:
    end = add_minutes(start, offering.duration_minutes)
    if not is_within_availability(schedule, start, end):
        raise SchedulingError(ErrorCode.RULE_SLOT_OUT_OF_AVAILABILITY, f"{start.isoformat()}..{end.isoformat()}")
    if await has_conflict(
        schedule.id, start, end, schedule.buffer_minutes, deps.appointments, exclude_id=exclude_id
    ):
        raise SchedulingError(ErrorCode.OVERLAP_APPOINTMENT, f"{start.isoformat()}..{end.isoformat()}")
    appointment = Appointment(
        id=deps.ids.next(),
        schedule_id=schedule.id,
        offering_id=offering.id,
        professional_id=schedule.professional_id,
        customer_id=customer_id,
        start=start,
        end=end,
        status=AppointmentStatus.PENDING,
        created_at=now,
        updated_at=now,
        notes=notes,
    )
    await deps.appointments.create(appointment)
    return appointment


async def create_appointment(
    schedule_id: str,
    offering_id: str,
    customer_id: str,
    start: datetime,
    deps: Deps,
    notes: str | None = None,
) -> Appointment:
    """Book a PENDING appointment after checking time, availability and conflicts."""
    now = ensure_utc(deps.clock.now())
    start = _require_future(start, now)
    schedule = await load_schedule(schedule_id, deps)
    offering = await load_bookable_offering(offering_id, deps)
    appointment = await _book(schedule, offering, customer_id, start, now, deps, notes=notes)
    logger.info(
        "Appointment %s created on schedule %s at %s for customer %s",
        appointment.id,
        schedule.id,
        appointment.start.isoformat(),
        customer_id,
    )
    return appointment


async def confirm_appointment(appointment_id: str, deps: Deps) -> Appointment:
    appointment = await _load_appointment(appointment_id, deps)
    if appointment.status != AppointmentStatus.PENDING:
        raise SchedulingError(ErrorCode.INVALID_STATUS_TRANSITION, appointment.status.value)
    now = ensure_utc(deps.clock.now())
    updated = replace(appointment, status=AppointmentStatus.CONFIRMED, updated_at=now)
    await deps.appointments.save(updated)
    logger.info("Appointment %s confirmed", appointment_id)
    return updated


def _closed(appointment: Appointment, action: AuditAction, actor_id: str, now: datetime, reason: str | None) -> Appointment:
    event = AuditEvent(at=now, by_user_id=actor_id, action=action, reason=reason)
    return replace(
        appointment,
        status=AppointmentStatus.CANCELLED,
        updated_at=now,
        audit=[*appointment.audit, event],
    )


async def cancel_appointment(
    appointment_id: str,
    actor_id: str,
    actor_role: UserRole,
    deps: Deps,
    reason: str | None = None,
) -> Appointment:
    """Cancel a PENDING or CONFIRMED appointment.

    Customers and professionals may cancel their own appointments; with the
    USER role they must do so at least ``policy.cancel_min_hours`` ahead.
    ADMIN and ASSISTANT may cancel any appointment at any time.
    """
    appointment = await _load_appointment(appointment_id, deps)
    _require_live(appointment)
    _authorize(appointment, actor_id, actor_role, ErrorCode.FORBIDDEN_CANCELLATION)
    now = ensure_utc(deps.clock.now())
    _check_cancel_window(appointment, actor_role, now, deps)

    updated = _closed(appointment, AuditAction.CANCEL, actor_id, now, reason)
    await deps.appointments.update(updated)
    logger.info("Appointment %s cancelled by %s", appointment_id, actor_id)
    return updated


async def reschedule_appointment(
    appointment_id: str,
    new_start: datetime,
    actor_id: str,
    actor_role: UserRole,
    deps: Deps,
    reason: str | None = None,
) -> Appointment:
    """Move an appointment by booking a new one and cancelling the old.

    The new slot goes through the same checks as a fresh booking, except that
    the appointment being moved is ignored by the conflict check. Every check
    runs before anything is written. Returns the new PENDING appointment; the
    old one stays in CANCELLED with a RESCHEDULE audit entry.
    """
    now = ensure_utc(deps.clock.now())
    old = await _load_appointment(appointment_id, deps)
    _require_live(old)
    _authorize(old, actor_id, actor_role, ErrorCode.FORBIDDEN_RESCHEDULE)
    _check_cancel_window(old, actor_role, now, deps)
    new_start = _require_future(new_start, now)

    schedule = await load_schedule(old.schedule_id, deps)
    offering = await load_bookable_offering(old.offering_id, deps)
    new = await _book(
        schedule,
        offering,
        old.customer_id,
        new_start,
        now,
        deps,
        notes=old.notes,
        exclude_id=old.id,
    )

    await deps.appointments.update(_closed(old, AuditAction.RESCHEDULE, actor_id, now, reason))
    logger.info(
        "Appointment %s rescheduled to %s (%s) by %s",
        old.id,
        new.id,
        new.start.isoformat(),
        actor_id,
    )
    return new
