# backend/appointly/schemas/bookings.py

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, Field, model_validator

BookingStatus = Literal["PENDING", "CONFIRMED", "CANCELLED", "COMPLETED", "NO_SHOW"]
PaymentStatus = Literal["UNPAID", "PENDING", "PAID", "REFUNDED", "FAILED"]


class BookingCreate(BaseModel):
    business_id: int
    service_id: int
    location_id: Optional[int] = None

    customer_name: str = Field(min_length=1)
    customer_email: EmailStr
    customer_phone: Optional[str] = None

    start_time: datetime
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class BookingUpdate(BaseModel):
    """Status change and/or reschedule."""
    status: Optional[BookingStatus] = None
    start_time: Optional[datetime] = None
    payment_status: Optional[PaymentStatus] = None
    cancel_reason: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def require_change(self):
        if not self.model_fields_set:
            raise ValueError("No changes provided")
        return self

    model_config = {"from_attributes": True}


class BookingRead(BaseModel):
    id: int

    business_id: int
    service_id: int
    location_id: Optional[int] = None
    recurring_booking_id: Optional[int] = None

    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None

    start_time: datetime
    end_time: datetime

    status: BookingStatus
    payment_status: PaymentStatus
    notes: Optional[str] = None
    cancel_reason: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
