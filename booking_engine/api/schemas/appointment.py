from datetime import datetime

from pydantic import BaseModel, Field

from booking_engine.domain.entities import Appointment, AppointmentStatus, AuditAction, Slot


class SlotInfo(BaseModel):
    start: datetime
    end: datetime

    @classmethod
    def from_slot(cls, slot: Slot) -> "SlotInfo":
        return cls(start=slot.start, end=slot.end)


class AvailableSlotsResponse(BaseModel):
    schedule_id: str
    offering_id: str
    from_: datetime = Field(serialization_alias="from")
    to: datetime
    slots: list[SlotInfo]


class BookAppointmentRequest(BaseModel):
    schedule_id: str = Field(min_length=1)
    offering_id: str = Field(min_length=1)
    start: datetime
    # Staff may book on behalf of a customer; others always book for themselves
    customer_id: str | None = None
    notes: str | None = None


class CancelAppointmentRequest(BaseModel):
    reason: str | None = None


class RescheduleAppointmentRequest(BaseModel):
    new_start: datetime
    reason: str | None = None


class AuditEventPublic(BaseModel):
    at: datetime
    by_user_id: str
    action: AuditAction
    reason: str | None = None


class AppointmentPublic(BaseModel):
    id: str
    schedule_id: str
    offering_id: str
    professional_id: str
    customer_id: str
    start: datetime
    end: datetime
    status: AppointmentStatus
    notes: str | None = None
    audit: list[AuditEventPublic] = []
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_appointment(cls, a: Appointment) -> "AppointmentPublic":
        return cls(
            id=a.id,
            schedule_id=a.schedule_id,
            offering_id=a.offering_id,
            professional_id=a.professional_id,
            customer_id=a.customer_id,
            start=a.start,
            end=a.end,
            status=a.status,
            notes=a.notes,
            audit=[
                AuditEventPublic(at=e.at, by_user_id=e.by_user_id, action=e.action, reason=e.reason)
                for e in a.audit
            ],
            created_at=a.created_at,
            updated_at=a.updated_at,
        )
