from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from app.services.materials import MaterialType


class MaterialLogCreate(BaseModel):
    recycler_id: Optional[int] = Field(None, alias="recyclerId")
    event_id: Optional[int] = Field(None, alias="eventId")
    weight: Decimal
    material: MaterialType = MaterialType.mixed

    class Config:
        populate_by_name = True


class MaterialLogOut(BaseModel):
    id: int
    user_id: int
    event_id: Optional[int] = None
    material: str
    weight: float
    rate_per_kg: float
    earnings: float
    created_at: datetime

    class Config:
        from_attributes = True
