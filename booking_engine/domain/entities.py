from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class OfferingStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class AppointmentStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    ATTENDED = "ATTENDED"
    NO_SHOW = "NO_SHOW"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES


_TERMINAL_STATUSES = frozenset(
    {AppointmentStatus.CANCELLED, AppointmentStatus.ATTENDED, AppointmentStatus.NO_SHOW}
)


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    USER = "USER"
    ASSISTANT = "ASSISTANT"

    @property
    def is_privileged(self) -> bool:
        """Staff roles bypass ownership and the cancellation window."""
        return self in (UserRole.ADMIN, UserRole.ASSISTANT)


class AuditAction(str, Enum):
    CANCEL = "CANCEL"
    RESCHEDULE = "RESCHEDULE"


@dataclass
class Offering:
    """A bookable service type with a fixed duration."""

    id: str
    name: str
    duration_minutes: int
    status: OfferingStatus = OfferingStatus.ACTIVE
    price: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == OfferingStatus.ACTIVE


@dataclass(frozen=True)
class DailyWindow:
    start: str  # "HH:MM"
    end: str  # "HH:MM"


@dataclass
class WeeklyTemplateItem:
    weekday: int  # 0 = Sunday ... 6 = Saturday
    windows: list[DailyWindow] = field(default_factory=list)


@dataclass
class ScheduleException:
    """Replaces the weekly template for one calendar date."""

    date: str  # YYYY-MM-DD
    available: bool
    windows: list[DailyWindow] = field(default_factory=list)


@dataclass
class Schedule:
    """A professional's weekly availability plus date-specific exceptions."""

    id: str
    professional_id: str
    weekly_template: list[WeeklyTemplateItem] = field(default_factory=list)
    exceptions: list[ScheduleException] = field(default_factory=list)
    buffer_minutes: int = 0
    timezone: str = "UTC"  # display metadata only
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def exception_for(self, date_key: str) -> ScheduleException | None:
        for exc in self.exceptions:
            if exc.date == date_key:
                return exc
        return None


@dataclass(frozen=True)
class AuditEvent:
    at: datetime
    by_user_id: str
    action: AuditAction
    reason: str | None = None


@dataclass
class Appointment:
    """A booking of one offering on one schedule."""

    id: str
    schedule_id: str
    offering_id: str
    professional_id: str
    customer_id: str
    start: datetime
    end: datetime
    status: AppointmentStatus
    created_at: datetime
    updated_at: datetime
    notes: str | None = None
    audit: list[AuditEvent] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.customer_id, self.professional_id)


@dataclass(frozen=True)
class Slot:
    start: datetime
    end: datetime
