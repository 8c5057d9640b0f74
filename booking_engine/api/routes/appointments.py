import logging

from fastapi import APIRouter, Depends, HTTPException, status

from booking_engine.api.deps import ScheduleLocker, get_booking_deps, get_current_actor, get_schedule_locker
from booking_engine.api.schemas.appointment import (
    AppointmentPublic,
    BookAppointmentRequest,
    CancelAppointmentRequest,
    RescheduleAppointmentRequest,
)
from booking_engine.core.security import Actor
from booking_engine.domain.errors import ErrorCode, SchedulingError
from booking_engine.domain.lifecycle import (
    cancel_appointment,
    confirm_appointment,
    create_appointment,
    reschedule_appointment,
)
from booking_engine.domain.ports import Deps

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.post("", response_model=AppointmentPublic, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    body: BookAppointmentRequest,
    deps: Deps = Depends(get_booking_deps),
    lock_schedule: ScheduleLocker = Depends(get_schedule_locker),
    actor: Actor = Depends(get_current_actor),
) -> AppointmentPublic:
    customer_id = actor.id
    if body.customer_id and body.customer_id != actor.id:
        if not actor.role.is_privileged:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only staff can book on behalf of another customer",
            )
        customer_id = body.customer_id
    await lock_schedule(body.schedule_id)
    appointment = await create_appointment(
        body.schedule_id,
        body.offering_id,
        customer_id,
        body.start,
        deps,
        notes=body.notes,
    )
    return AppointmentPublic.from_appointment(appointment)


@router.get("/{appointment_id}", response_model=AppointmentPublic)
async def get_appointment(
    appointment_id: str,
    deps: Deps = Depends(get_booking_deps),
    actor: Actor = Depends(get_current_actor),
) -> AppointmentPublic:
    appointment = await deps.appointments.find_by_id(appointment_id)
    # Hide other people's appointments behind the same not-found answer
    if appointment is None or not (actor.role.is_privileged or appointment.is_participant(actor.id)):
        raise SchedulingError(ErrorCode.APPOINTMENT_NOT_FOUND, appointment_id)
    return AppointmentPublic.from_appointment(appointment)


@router.post("/{appointment_id}/confirm", response_model=AppointmentPublic)
async def confirm(
    appointment_id: str,
    deps: Deps = Depends(get_booking_deps),
    actor: Actor = Depends(get_current_actor),
) -> AppointmentPublic:
    current = await deps.appointments.find_by_id(appointment_id)
    if current is not None and not (actor.role.is_privileged or current.is_participant(actor.id)):
        raise SchedulingError(ErrorCode.FORBIDDEN, f"actor {actor.id} confirming {appointment_id}")
    appointment = await confirm_appointment(appointment_id, deps)
    logger.debug("Confirm of %s requested by %s", appointment_id, actor.id)
    return AppointmentPublic.from_appointment(appointment)


@router.post("/{appointment_id}/cancel", response_model=AppointmentPublic)
async def cancel(
    appointment_id: str,
    body: CancelAppointmentRequest | None = None,
    deps: Deps = Depends(get_booking_deps),
    actor: Actor = Depends(get_current_actor),
) -> AppointmentPublic:
    appointment = await cancel_appointment(
        appointment_id,
        actor.id,
        actor.role,
        deps,
        reason=body.reason if body else None,
    )
    return AppointmentPublic.from_appointment(appointment)


@router.post("/{appointment_id}/reschedule", response_model=AppointmentPublic)
async def reschedule(
    appointment_id: str,
    body: RescheduleAppointmentRequest,
    deps: Deps = Depends(get_booking_deps),
    lock_schedule: ScheduleLocker = Depends(get_schedule_locker),
    actor: Actor = Depends(get_current_actor),
) -> AppointmentPublic:
    current = await deps.appointments.find_by_id(appointment_id)
    if current is not None:
        await lock_schedule(current.schedule_id)
    appointment = await reschedule_appointment(
        appointment_id,
        body.new_start,
        actor.id,
        actor.role,
        deps,
        reason=body.reason,
    )
    return AppointmentPublic.from_appointment(appointment)
