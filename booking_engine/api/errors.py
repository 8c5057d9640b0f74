import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from booking_engine.domain.errors import ErrorCode, SchedulingError

logger = logging.getLogger(__name__)

_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.SCHEDULE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.OFFERING_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.APPOINTMENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.FORBIDDEN_CANCELLATION: status.HTTP_403_FORBIDDEN,
    ErrorCode.FORBIDDEN_RESCHEDULE: status.HTTP_403_FORBIDDEN,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.OVERLAP_APPOINTMENT: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_STATUS_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.RULE_INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.CANCEL_WINDOW_VIOLATION: status.HTTP_409_CONFLICT,
    ErrorCode.RULE_PAST_APPOINTMENT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.OFFERING_INACTIVE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.RULE_SLOT_OUT_OF_AVAILABILITY: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_TIME_FORMAT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_SCHEDULE: status.HTTP_400_BAD_REQUEST,
}


def http_status_for(code: ErrorCode) -> int:
    return _STATUS_BY_CODE.get(code, status.HTTP_400_BAD_REQUEST)


async def scheduling_error_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    logger.info("%s %s rejected: %r", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=http_status_for(exc.code),
        content={"error": exc.code.value},
    )
