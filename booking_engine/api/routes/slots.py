from datetime import date, datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status

from booking_engine.api.deps import get_booking_deps, get_current_actor
from booking_engine.api.schemas.appointment import AvailableSlotsResponse, SlotInfo
from booking_engine.core.config import settings
from booking_engine.core.security import Actor
from booking_engine.domain.ports import Deps
from booking_engine.domain.slots import list_available_slots
from booking_engine.domain.timeutils import ensure_utc

router = APIRouter(prefix="/schedules", tags=["availability"])


def _resolve_range(
    day: date | None, range_from: datetime | None, range_to: datetime | None
) -> tuple[datetime, datetime]:
    if day is not None:
        start = datetime(day.year, day.month, day.day)
        return ensure_utc(start), ensure_utc(start + timedelta(days=1))
    if range_from is None or range_to is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Provide either date or both from and to",
        )
    start, end = ensure_utc(range_from), ensure_utc(range_to)
    if end - start > timedelta(days=settings.availability_max_days):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Range too large (max {settings.availability_max_days} days)",
        )
    return start, end


@router.get("/{schedule_id}/availability", response_model=AvailableSlotsResponse)
async def available_slots(
    schedule_id: str,
    offering_id: str = Query(..., min_length=1),
    day: date | None = Query(None, alias="date"),
    range_from: datetime | None = Query(None, alias="from"),
    range_to: datetime | None = Query(None, alias="to"),
    deps: Deps = Depends(get_booking_deps),
    _actor: Actor = Depends(get_current_actor),
) -> AvailableSlotsResponse:
    """Free slots for an offering, either for one UTC day or for [from, to)."""
    start, end = _resolve_range(day, range_from, range_to)
    slots = await list_available_slots(schedule_id, offering_id, start, end, deps)
    return AvailableSlotsResponse(
        schedule_id=schedule_id,
        offering_id=offering_id,
        from_=start,
        to=end,
        slots=[SlotInfo.from_slot(s) for s in slots],
    )
