# backend/appointly/schemas/business.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from ..services.policy.rules import (
    MAX_ADVANCE_BOOKING_HOURS,
    MAX_BOOKING_BUFFER_MINUTES,
    MAX_CANCELLATION_POLICY_HOURS,
)


class BookingRulesUpdate(BaseModel):
    minimum_advance_booking_hours: int = Field(ge=0, le=MAX_ADVANCE_BOOKING_HOURS)
    cancellation_policy_hours: int = Field(ge=0, le=MAX_CANCELLATION_POLICY_HOURS)
    booking_buffer_minutes: int = Field(ge=0, le=MAX_BOOKING_BUFFER_MINUTES)

    model_config = {"from_attributes": True}


class BookingRulesRead(BookingRulesUpdate):
    pass


class BusinessCreate(BaseModel):
    business_name: str = Field(min_length=1)
    timezone: str = "UTC"

    model_config = {"from_attributes": True}


class BusinessRead(BaseModel):
    id: int
    business_name: str
    timezone: str
    minimum_advance_booking_hours: int
    cancellation_policy_hours: int
    booking_buffer_minutes: int
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
