import datetime as dt

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel

from booking_engine.models._time import utc_naive_now


class ScheduleRow(SQLModel, table=True):
    __tablename__ = "schedules"
    id: str = Field(primary_key=True)
    professional_id: str = Field(index=True)
    timezone: str = "UTC"
    buffer_minutes: int = Field(default=0, ge=0)
    created_at: dt.datetime = Field(default_factory=utc_naive_now)
    updated_at: dt.datetime = Field(default_factory=utc_naive_now)


class WeeklyWindowRow(SQLModel, table=True):
    """One open window of the weekly template; a weekday may have several rows."""

    __tablename__ = "schedule_weekly_windows"
    id: int | None = Field(default=None, primary_key=True)
    schedule_id: str = Field(foreign_key="schedules.id", index=True)
    weekday: int = Field(ge=0, le=6)  # 0 = Sunday
    start: str  # HH:MM
    end: str  # HH:MM


class ScheduleExceptionRow(SQLModel, table=True):
    __tablename__ = "schedule_exceptions"
    __table_args__ = (UniqueConstraint("schedule_id", "date", name="uq_schedule_exceptions_schedule_date"),)
    id: int | None = Field(default=None, primary_key=True)
    schedule_id: str = Field(foreign_key="schedules.id", index=True)
    date: dt.date
    available: bool = False
    # [{"start": "HH:MM", "end": "HH:MM"}, ...]
    windows: list[dict] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
