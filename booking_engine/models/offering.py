from datetime import datetime

from sqlmodel import Field, SQLModel

from booking_engine.models._time import utc_naive_now


class OfferingRow(SQLModel, table=True):
    __tablename__ = "offerings"
    id: str = Field(primary_key=True)
    name: str
    duration_minutes: int = Field(gt=0)
    price: float | None = None
    status: str = Field(default="ACTIVE", index=True)
    created_at: datetime = Field(default_factory=utc_naive_now)
    updated_at: datetime = Field(default_factory=utc_naive_now)
