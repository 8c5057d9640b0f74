"""In-memory implementations of the booking ports.

Used by the test suite and handy for local experiments without a database.
"""

from dataclasses import replace
from datetime import datetime, timedelta

from booking_engine.domain.entities import Appointment, Offering, Schedule
from booking_engine.domain.timeutils import ensure_utc


class InMemoryOfferingRepository:
    def __init__(self, offerings: list[Offering] | None = None):
        self.offerings = {o.id: o for o in offerings or []}

    async def find_by_id(self, offering_id: str) -> Offering | None:
        return self.offerings.get(offering_id)


class InMemoryScheduleRepository:
    def __init__(self, schedules: list[Schedule] | None = None):
        self.schedules = {s.id: s for s in schedules or []}

    async def find_by_id(self, schedule_id: str) -> Schedule | None:
        return self.schedules.get(schedule_id)

    async def create(self, schedule: Schedule) -> None:
        if schedule.id in self.schedules:
            raise ValueError(f"Duplicate schedule id: {schedule.id}")
        self.schedules[schedule.id] = schedule


class InMemoryAppointmentRepository:
    """Keeps appointments in insertion order; returns copies so callers cannot mutate storage."""

    def __init__(self, appointments: list[Appointment] | None = None):
        self.appointments: dict[str, Appointment] = {}
        self.create_calls = 0
        for a in appointments or []:
            self.seed(a)

    def seed(self, appointment: Appointment) -> None:
        self.appointments[appointment.id] = appointment

    def all(self) -> list[Appointment]:
        return [replace(a) for a in self.appointments.values()]

    async def find_by_id(self, appointment_id: str) -> Appointment | None:
        appointment = self.appointments.get(appointment_id)
        return replace(appointment) if appointment else None

    def _intersecting(self, schedule_id: str, start: datetime, end: datetime) -> list[Appointment]:
        return [
            replace(a)
            for a in self.appointments.values()
            if a.schedule_id == schedule_id and a.start < end and start < a.end
        ]

    async def find_overlap(self, schedule_id: str, start: datetime, end: datetime) -> list[Appointment]:
        return self._intersecting(schedule_id, start, end)

    async def list_by_schedule_and_range(
        self, schedule_id: str, start: datetime, end: datetime
    ) -> list[Appointment]:
        return sorted(self._intersecting(schedule_id, start, end), key=lambda a: a.start)

    async def create(self, appointment: Appointment) -> None:
        if appointment.id in self.appointments:
            raise ValueError(f"Duplicate appointment id: {appointment.id}")
        self.create_calls += 1
        self.appointments[appointment.id] = replace(appointment)

    async def update(self, appointment: Appointment) -> None:
        if appointment.id not in self.appointments:
            raise KeyError(appointment.id)
        self.appointments[appointment.id] = replace(appointment)

    async def save(self, appointment: Appointment) -> None:
        self.appointments[appointment.id] = replace(appointment)


class FixedClock:
    def __init__(self, now: datetime):
        self.current = ensure_utc(now)

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


class SequentialIdGenerator:
    def __init__(self, prefix: str = "appt"):
        self.prefix = prefix
        self.counter = 0

    def next(self) -> str:
        self.counter += 1
        return f"{self.prefix}-{self.counter}"
