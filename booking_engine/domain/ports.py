"""Data-access and infrastructure seams consumed by the booking use cases."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from booking_engine.domain.entities import Appointment, Offering, Schedule


class OfferingRepository(Protocol):
    async def find_by_id(self, offering_id: str) -> Offering | None:
        ...


class ScheduleRepository(Protocol):
    async def find_by_id(self, schedule_id: str) -> Schedule | None:
        ...

    async def create(self, schedule: Schedule) -> None:
        ...


class AppointmentRepository(Protocol):
    """Appointment storage.

    Range queries use raw interval intersection (``a.start < end and
    start < a.end``); no buffer is applied and statuses are not filtered.
    """

    async def find_by_id(self, appointment_id: str) -> Appointment | None:
        ...

    async def find_overlap(self, schedule_id: str, start: datetime, end: datetime) -> list[Appointment]:
        """Appointments on the schedule intersecting [start, end)."""
        ...

    async def list_by_schedule_and_range(
        self, schedule_id: str, start: datetime, end: datetime
    ) -> list[Appointment]:
        """Appointments on the schedule intersecting [start, end), ordered by start."""
        ...

    async def create(self, appointment: Appointment) -> None:
        ...

    async def update(self, appointment: Appointment) -> None:
        ...

    async def save(self, appointment: Appointment) -> None:
        """Insert or replace by id."""
        ...


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class IdGenerator(Protocol):
    def next(self) -> str:
        ...


@dataclass(frozen=True)
class CancellationPolicy:
    cancel_min_hours: float = 24


@dataclass
class Deps:
    """Explicit collaborator bundle handed to every use case."""

    offerings: OfferingRepository
    schedules: ScheduleRepository
    appointments: AppointmentRepository
    clock: Clock
    ids: IdGenerator
    policy: CancellationPolicy = field(default_factory=CancellationPolicy)
