from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.services.materials import MAX_WEIGHT


class EventCreate(BaseModel):
    address: str
    description: Optional[str] = None
    start_time: datetime
    weight_capacity: Decimal = Field(..., gt=0, le=MAX_WEIGHT, decimal_places=3)

    @field_validator("start_time")
    @classmethod
    def to_naive_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class EventOut(BaseModel):
    id: int
    address: str
    description: Optional[str] = None
    start_time: datetime
    weight_capacity: float
    created_at: datetime

    class Config:
        from_attributes = True


class EventDetail(EventOut):
    committed_weight: float
    remaining_capacity: float


class TransitionOut(BaseModel):
    from_status: Optional[str] = None
    to_status: str
    actor_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ParticipationOut(BaseModel):
    id: int
    user_id: int
    event_id: int
    status: str
    joined_at: datetime
    attended_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ParticipationHistory(ParticipationOut):
    transitions: List[TransitionOut] = []
