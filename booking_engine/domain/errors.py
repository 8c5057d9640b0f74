from enum import Enum


class ErrorCode(str, Enum):
    RULE_PAST_APPOINTMENT = "RULE_PAST_APPOINTMENT"
    SCHEDULE_NOT_FOUND = "SCHEDULE_NOT_FOUND"
    OFFERING_NOT_FOUND = "OFFERING_NOT_FOUND"
    OFFERING_INACTIVE = "OFFERING_INACTIVE"
    RULE_SLOT_OUT_OF_AVAILABILITY = "RULE_SLOT_OUT_OF_AVAILABILITY"
    OVERLAP_APPOINTMENT = "OVERLAP_APPOINTMENT"
    APPOINTMENT_NOT_FOUND = "APPOINTMENT_NOT_FOUND"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    RULE_INVALID_TRANSITION = "RULE_INVALID_TRANSITION"
    FORBIDDEN_CANCELLATION = "FORBIDDEN_CANCELLATION"
    FORBIDDEN_RESCHEDULE = "FORBIDDEN_RESCHEDULE"
    CANCEL_WINDOW_VIOLATION = "CANCEL_WINDOW_VIOLATION"
    FORBIDDEN = "FORBIDDEN"
    INVALID_TIME_FORMAT = "INVALID_TIME_FORMAT"
    INVALID_SCHEDULE = "INVALID_SCHEDULE"


class SchedulingError(Exception):
    """Raised by the booking domain with a stable error code.

    Callers branch on ``code``; the optional detail is for logs only.
    """

    def __init__(self, code: ErrorCode, detail: str | None = None) -> None:
        super().__init__(code.value)
        self.code = code
        self.detail = detail

    def __str__(self) -> str:
        return self.code.value

    def __repr__(self) -> str:
        if self.detail:
            return f"SchedulingError({self.code.value}: {self.detail})"
        return f"SchedulingError({self.code.value})"
