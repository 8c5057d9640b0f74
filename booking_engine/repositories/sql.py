"""SQLModel-backed implementations of the booking repositories."""

import logging
from datetime import date, datetime

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.domain.entities import (
    Appointment,
    AppointmentStatus,
    AuditAction,
    AuditEvent,
    DailyWindow,
    Offering,
    OfferingStatus,
    Schedule,
    ScheduleException,
    WeeklyTemplateItem,
)
from booking_engine.models import (
    AppointmentRow,
    AuditEventRow,
    OfferingRow,
    ScheduleExceptionRow,
    ScheduleRow,
    WeeklyWindowRow,
)
from booking_engine.models._time import from_naive_utc, to_naive_utc, utc_naive_now

logger = logging.getLogger(__name__)


def offering_to_domain(row: OfferingRow) -> Offering:
    return Offering(
        id=row.id,
        name=row.name,
        duration_minutes=row.duration_minutes,
        status=OfferingStatus(row.status),
        price=row.price,
        created_at=from_naive_utc(row.created_at),
        updated_at=from_naive_utc(row.updated_at),
    )


def schedule_to_domain(
    row: ScheduleRow,
    windows: list[WeeklyWindowRow],
    exceptions: list[ScheduleExceptionRow],
) -> Schedule:
    by_weekday: dict[int, list[DailyWindow]] = {}
    for w in sorted(windows, key=lambda w: (w.weekday, w.start)):
        by_weekday.setdefault(w.weekday, []).append(DailyWindow(start=w.start, end=w.end))
    return Schedule(
        id=row.id,
        professional_id=row.professional_id,
        weekly_template=[WeeklyTemplateItem(weekday=d, windows=ws) for d, ws in by_weekday.items()],
        exceptions=[
            ScheduleException(
                date=e.date.isoformat(),
                available=e.available,
                windows=[DailyWindow(start=w["start"], end=w["end"]) for w in e.windows or []],
            )
            for e in exceptions
        ],
        buffer_minutes=row.buffer_minutes,
        timezone=row.timezone,
        created_at=from_naive_utc(row.created_at),
        updated_at=from_naive_utc(row.updated_at),
    )


def schedule_to_rows(
    schedule: Schedule,
) -> tuple[ScheduleRow, list[WeeklyWindowRow], list[ScheduleExceptionRow]]:
    created_at = to_naive_utc(schedule.created_at) if schedule.created_at else utc_naive_now()
    updated_at = to_naive_utc(schedule.updated_at) if schedule.updated_at else created_at
    row = ScheduleRow(
        id=schedule.id,
        professional_id=schedule.professional_id,
        timezone=schedule.timezone,
        buffer_minutes=schedule.buffer_minutes,
        created_at=created_at,
        updated_at=updated_at,
    )
    windows = [
        WeeklyWindowRow(schedule_id=schedule.id, weekday=item.weekday, start=w.start, end=w.end)
        for item in schedule.weekly_template
        for w in item.windows
    ]
    exceptions = [
        ScheduleExceptionRow(
            schedule_id=schedule.id,
            date=date.fromisoformat(e.date),
            available=e.available,
            windows=[{"start": w.start, "end": w.end} for w in e.windows],
        )
        for e in schedule.exceptions
    ]
    return row, windows, exceptions


def appointment_to_domain(row: AppointmentRow, audit: list[AuditEventRow] | None = None) -> Appointment:
    return Appointment(
        id=row.id,
        schedule_id=row.schedule_id,
        offering_id=row.offering_id,
        professional_id=row.professional_id,
        customer_id=row.customer_id,
        start=from_naive_utc(row.start),
        end=from_naive_utc(row.end),
        status=AppointmentStatus(row.status),
        created_at=from_naive_utc(row.created_at),
        updated_at=from_naive_utc(row.updated_at),
        notes=row.notes,
        audit=[
            AuditEvent(
                at=from_naive_utc(e.at),
                by_user_id=e.by_user_id,
                action=AuditAction(e.action),
                reason=e.reason,
            )
            for e in sorted(audit or [], key=lambda e: e.seq)
        ],
    )


def _apply(row: AppointmentRow, appointment: Appointment) -> AppointmentRow:
    row.schedule_id = appointment.schedule_id
    row.offering_id = appointment.offering_id
    row.professional_id = appointment.professional_id
    row.customer_id = appointment.customer_id
    row.start = to_naive_utc(appointment.start)
    row.end = to_naive_utc(appointment.end)
    row.status = appointment.status.value
    row.notes = appointment.notes
    row.created_at = to_naive_utc(appointment.created_at)
    row.updated_at = to_naive_utc(appointment.updated_at)
    return row


class SqlOfferingRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, offering_id: str) -> Offering | None:
        row = await self.session.get(OfferingRow, offering_id)
        return offering_to_domain(row) if row else None


class SqlScheduleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, schedule_id: str) -> Schedule | None:
        row = await self.session.get(ScheduleRow, schedule_id)
        if not row:
            return None
        windows = await self.session.execute(
            select(WeeklyWindowRow).where(WeeklyWindowRow.schedule_id == schedule_id)
        )
        exceptions = await self.session.execute(
            select(ScheduleExceptionRow).where(ScheduleExceptionRow.schedule_id == schedule_id)
        )
        return schedule_to_domain(row, list(windows.scalars().all()), list(exceptions.scalars().all()))

    async def create(self, schedule: Schedule) -> None:
        row, windows, exceptions = schedule_to_rows(schedule)
        self.session.add(row)
        # Parent row first so the child foreign keys resolve
        await self.session.flush()
        self.session.add_all([*windows, *exceptions])
        await self.session.flush()
        logger.debug(
            "Schedule %s stored with %d window(s) and %d exception(s)",
            schedule.id,
            len(windows),
            len(exceptions),
        )


class SqlAppointmentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def lock_schedule(self, schedule_id: str) -> None:
        """Serialize bookings on one schedule until the current transaction ends.

        Uses a PostgreSQL transaction-level advisory lock; other dialects are
        left unserialized.
        """
        if self.session.bind is None or self.session.bind.dialect.name != "postgresql":
            return
        await self.session.execute(
            text("SELECT pg_advisory_xact_lock(hashtext(:key))"), {"key": f"schedule:{schedule_id}"}
        )

    async def _audit_for(self, ids: list[str]) -> dict[str, list[AuditEventRow]]:
        if not ids:
            return {}
        result = await self.session.execute(
            select(AuditEventRow).where(AuditEventRow.appointment_id.in_(ids))
        )
        out: dict[str, list[AuditEventRow]] = {}
        for e in result.scalars().all():
            out.setdefault(e.appointment_id, []).append(e)
        return out

    async def _to_domain(self, rows: list[AppointmentRow]) -> list[Appointment]:
        audit = await self._audit_for([r.id for r in rows])
        return [appointment_to_domain(r, audit.get(r.id)) for r in rows]

    async def find_by_id(self, appointment_id: str) -> Appointment | None:
        row = await self.session.get(AppointmentRow, appointment_id)
        if not row:
            return None
        return (await self._to_domain([row]))[0]

    async def find_overlap(self, schedule_id: str, start: datetime, end: datetime) -> list[Appointment]:
        result = await self.session.execute(
            select(AppointmentRow).where(
                AppointmentRow.schedule_id == schedule_id,
                AppointmentRow.start < to_naive_utc(end),
                AppointmentRow.end > to_naive_utc(start),
            )
        )
        return await self._to_domain(list(result.scalars().all()))

    async def list_by_schedule_and_range(
        self, schedule_id: str, start: datetime, end: datetime
    ) -> list[Appointment]:
        result = await self.session.execute(
            select(AppointmentRow)
            .where(
                AppointmentRow.schedule_id == schedule_id,
                AppointmentRow.start < to_naive_utc(end),
                AppointmentRow.end > to_naive_utc(start),
            )
            .order_by(AppointmentRow.start)
        )
        return await self._to_domain(list(result.scalars().all()))

    async def _append_audit(self, appointment: Appointment) -> None:
        result = await self.session.execute(
            select(func.count()).select_from(AuditEventRow).where(
                AuditEventRow.appointment_id == appointment.id
            )
        )
        stored = result.scalar_one()
        for seq, event in enumerate(appointment.audit[stored:], start=stored):
            self.session.add(
                AuditEventRow(
                    appointment_id=appointment.id,
                    seq=seq,
                    at=to_naive_utc(event.at),
                    by_user_id=event.by_user_id,
                    action=event.action.value,
                    reason=event.reason,
                )
            )

    async def create(self, appointment: Appointment) -> None:
        self.session.add(_apply(AppointmentRow(id=appointment.id), appointment))
        await self.session.flush()
        await self._append_audit(appointment)
        await self.session.flush()

    async def update(self, appointment: Appointment) -> None:
        await self.save(appointment)

    async def save(self, appointment: Appointment) -> None:
        row = await self.session.get(AppointmentRow, appointment.id)
        if row is None:
            await self.create(appointment)
            return
        self.session.add(_apply(row, appointment))
        await self.session.flush()
        await self._append_audit(appointment)
        await self.session.flush()
        logger.debug("Appointment %s saved with status %s", appointment.id, appointment.status.value)
