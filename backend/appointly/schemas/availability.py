# backend/appointly/schemas/availability.py

import re
from typing import Optional
from pydantic import BaseModel, Field, field_validator

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class DayHours(BaseModel):
    open: Optional[str] = Field(None, description="HH:MM")
    close: Optional[str] = Field(None, description="HH:MM")
    isOpen: bool = False

    @field_validator("open", "close")
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not _TIME_RE.match(v):
            raise ValueError("Time must be in HH:MM format")
        return v


class WeeklyAvailability(BaseModel):
    monday: Optional[DayHours] = None
    tuesday: Optional[DayHours] = None
    wednesday: Optional[DayHours] = None
    thursday: Optional[DayHours] = None
    friday: Optional[DayHours] = None
    saturday: Optional[DayHours] = None
    sunday: Optional[DayHours] = None

    model_config = {"from_attributes": True}


class AvailabilityRead(WeeklyAvailability):
    business_id: int
    configured: bool = True
