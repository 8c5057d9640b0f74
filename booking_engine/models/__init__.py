from booking_engine.models.appointment import AppointmentRow, AuditEventRow
from booking_engine.models.offering import OfferingRow
from booking_engine.models.schedule import ScheduleExceptionRow, ScheduleRow, WeeklyWindowRow

__all__ = [
    "AppointmentRow",
    "AuditEventRow",
    "OfferingRow",
    "ScheduleExceptionRow",
    "ScheduleRow",
    "WeeklyWindowRow",
]
