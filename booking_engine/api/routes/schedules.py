from fastapi import APIRouter, Depends, status

from booking_engine.api.deps import get_booking_deps, get_current_actor
from booking_engine.api.schemas.schedule import CreateScheduleRequest, SchedulePublic
from booking_engine.core.security import Actor
from booking_engine.domain.ports import Deps
from booking_engine.domain.schedules import create_schedule, get_schedule

router = APIRouter(prefix="/schedules", tags=["schedules"])


@router.post("", response_model=SchedulePublic, status_code=status.HTTP_201_CREATED)
async def create(
    body: CreateScheduleRequest,
    deps: Deps = Depends(get_booking_deps),
    actor: Actor = Depends(get_current_actor),
) -> SchedulePublic:
    """Create a schedule owned by the caller."""
    schedule = await create_schedule(
        actor.id,
        [item.to_domain() for item in body.weekly_template],
        deps,
        exceptions=[e.to_domain() for e in body.exceptions],
        buffer_minutes=body.buffer_minutes,
        timezone=body.timezone,
    )
    return SchedulePublic.from_schedule(schedule)


@router.get("/{schedule_id}", response_model=SchedulePublic)
async def read(
    schedule_id: str,
    deps: Deps = Depends(get_booking_deps),
    actor: Actor = Depends(get_current_actor),
) -> SchedulePublic:
    schedule = await get_schedule(schedule_id, actor.id, actor.role, deps)
    return SchedulePublic.from_schedule(schedule)
