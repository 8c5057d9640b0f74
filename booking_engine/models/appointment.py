from datetime import datetime

from sqlmodel import Field, SQLModel

from booking_engine.models._time import utc_naive_now


class AppointmentRow(SQLModel, table=True):
    __tablename__ = "appointments"
    id: str = Field(primary_key=True)
    schedule_id: str = Field(foreign_key="schedules.id", index=True)
    offering_id: str = Field(foreign_key="offerings.id", index=True)
    professional_id: str = Field(index=True)
    customer_id: str = Field(index=True)
    start: datetime = Field(index=True)
    end: datetime = Field(index=True)
    status: str = Field(default="PENDING", index=True)
    notes: str | None = None
    created_at: datetime = Field(default_factory=utc_naive_now)
    updated_at: datetime = Field(default_factory=utc_naive_now)


class AuditEventRow(SQLModel, table=True):
    """Append-only history of an appointment; rows are never updated."""

    __tablename__ = "appointment_audit_events"
    id: int | None = Field(default=None, primary_key=True)
    appointment_id: str = Field(foreign_key="appointments.id", index=True)
    seq: int
    at: datetime
    by_user_id: str
    action: str
    reason: str | None = None
