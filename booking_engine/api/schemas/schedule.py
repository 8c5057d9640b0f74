import datetime as dt

from pydantic import BaseModel, Field

from booking_engine.domain.entities import DailyWindow, Schedule, ScheduleException, WeeklyTemplateItem


class WindowSchema(BaseModel):
    start: str = Field(min_length=1, examples=["09:00"])
    end: str = Field(min_length=1, examples=["17:00"])

    def to_domain(self) -> DailyWindow:
        return DailyWindow(start=self.start, end=self.end)


class WeeklyTemplateItemSchema(BaseModel):
    weekday: int = Field(ge=0, le=6, description="0 = Sunday")
    windows: list[WindowSchema] = Field(min_length=1)

    def to_domain(self) -> WeeklyTemplateItem:
        return WeeklyTemplateItem(weekday=self.weekday, windows=[w.to_domain() for w in self.windows])


class ScheduleExceptionSchema(BaseModel):
    date: dt.date
    available: bool
    # Only read when available; an available day with no windows stays closed
    windows: list[WindowSchema] = []

    def to_domain(self) -> ScheduleException:
        return ScheduleException(
            date=self.date.isoformat(),
            available=self.available,
            windows=[w.to_domain() for w in self.windows],
        )


class CreateScheduleRequest(BaseModel):
    timezone: str = Field(default="UTC", min_length=1)
    buffer_minutes: int = Field(default=0, ge=0)
    weekly_template: list[WeeklyTemplateItemSchema] = Field(min_length=1)
    exceptions: list[ScheduleExceptionSchema] = []


class SchedulePublic(BaseModel):
    id: str
    professional_id: str
    timezone: str
    buffer_minutes: int
    weekly_template: list[WeeklyTemplateItemSchema]
    exceptions: list[ScheduleExceptionSchema]
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None

    @classmethod
    def from_schedule(cls, s: Schedule) -> "SchedulePublic":
        return cls(
            id=s.id,
            professional_id=s.professional_id,
            timezone=s.timezone,
            buffer_minutes=s.buffer_minutes,
            weekly_template=[
                WeeklyTemplateItemSchema(
                    weekday=item.weekday,
                    windows=[WindowSchema(start=w.start, end=w.end) for w in item.windows],
                )
                for item in s.weekly_template
            ],
            exceptions=[
                ScheduleExceptionSchema(
                    date=dt.date.fromisoformat(e.date),
                    available=e.available,
                    windows=[WindowSchema(start=w.start, end=w.end) for w in e.windows],
                )
                for e in s.exceptions
            ],
            created_at=s.created_at,
            updated_at=s.updated_at,
        )
