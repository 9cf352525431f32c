# backend/appointly/schemas/recurring_bookings.py

from datetime import date, datetime
from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from ..services.recurring import parse_start_time

Frequency = Literal["DAILY", "WEEKLY", "BIWEEKLY", "MONTHLY"]


class RecurringBookingCreate(BaseModel):
    business_id: int
    service_id: int
    location_id: Optional[int] = None

    customer_name: str = Field(min_length=1)
    customer_email: EmailStr
    customer_phone: Optional[str] = None

    frequency: Frequency
    day_of_week: Optional[int] = Field(None, ge=0, le=6, description="0 = Monday")
    day_of_month: Optional[int] = Field(None, ge=1, le=31)
    start_time: str = Field(description='"14:00" or "2:00 PM"')
    start_date: date
    end_date: Optional[date] = None
    number_of_occurrences: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = None

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v: str) -> str:
        parse_start_time(v)
        return v

    @model_validator(mode="after")
    def validate_pattern(self):
        if self.frequency in ("WEEKLY", "BIWEEKLY") and self.day_of_week is None:
            raise ValueError("day_of_week is required for weekly and bi-weekly bookings")
        if self.frequency == "MONTHLY" and self.day_of_month is None:
            raise ValueError("day_of_month is required for monthly bookings")
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    model_config = {"from_attributes": True}


class RecurringBookingUpdate(BaseModel):
    is_active: Optional[bool] = None
    end_date: Optional[date] = None
    number_of_occurrences: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class RecurringBookingRead(BaseModel):
    id: int
    business_id: int
    service_id: int
    location_id: Optional[int] = None

    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None

    frequency: Frequency
    day_of_week: Optional[int] = None
    day_of_month: Optional[int] = None
    start_time: str
    start_date: date
    end_date: Optional[date] = None
    number_of_occurrences: Optional[int] = None
    last_generated_date: Optional[datetime] = None
    is_active: bool
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class GenerateRequest(BaseModel):
    business_id: int
    recurring_id: Optional[int] = None
    up_to: Optional[datetime] = Field(None, description="Defaults to now + slot horizon")


class GenerateResponse(BaseModel):
    success: bool = True
    created: int
    skipped: int
    errors: int
    message: str
