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
    Slot,
    UserRole,
    WeeklyTemplateItem,
)
from booking_engine.domain.errors import ErrorCode, SchedulingError
from booking_engine.domain.lifecycle import (
    cancel_appointment,
    confirm_appointment,
    create_appointment,
    reschedule_appointment,
)
from booking_engine.domain.ports import CancellationPolicy, Deps
from booking_engine.domain.schedules import create_schedule, get_schedule
from booking_engine.domain.slots import generate_slots, list_available_slots

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "AuditAction",
    "AuditEvent",
    "DailyWindow",
    "Offering",
    "OfferingStatus",
    "Schedule",
    "ScheduleException",
    "Slot",
    "UserRole",
    "WeeklyTemplateItem",
    "ErrorCode",
    "SchedulingError",
    "cancel_appointment",
    "confirm_appointment",
    "create_appointment",
    "reschedule_appointment",
    "CancellationPolicy",
    "Deps",
    "create_schedule",
    "get_schedule",
    "generate_slots",
    "list_available_slots",
]
