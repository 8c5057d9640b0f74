from collections.abc import Awaitable, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.core.config import settings
from booking_engine.core.db import get_session
from booking_engine.core.security import Actor, decode_access_token
from booking_engine.domain.ports import CancellationPolicy, Deps
from booking_engine.repositories.sql import (
    SqlAppointmentRepository,
    SqlOfferingRepository,
    SqlScheduleRepository,
)
from booking_engine.repositories.system import SystemClock, UuidGenerator

security = HTTPBearer(auto_error=False)

ScheduleLocker = Callable[[str], Awaitable[None]]


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Actor:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )
    actor = decode_access_token(credentials.credentials)
    if not actor:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return actor


def get_booking_deps(session: AsyncSession = Depends(get_session)) -> Deps:
    """Per-request collaborator bundle backed by the request's DB session."""
    return Deps(
        offerings=SqlOfferingRepository(session),
        schedules=SqlScheduleRepository(session),
        appointments=SqlAppointmentRepository(session),
        clock=SystemClock(),
        ids=UuidGenerator(),
        policy=CancellationPolicy(cancel_min_hours=settings.cancel_min_hours),
    )


def get_schedule_locker(session: AsyncSession = Depends(get_session)) -> ScheduleLocker:
    """Serializes Create/Reschedule per schedule for the rest of the transaction."""
    return SqlAppointmentRepository(session).lock_schedule
