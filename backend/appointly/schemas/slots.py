# backend/appointly/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel


class SlotsDayResponse(BaseModel):
    """Bookable start times for a service on one day (Level 2)."""
    business_id: int
    service_id: int
    location_id: Optional[int] = None
    date: date
    service_duration_min: int
    available_times: list[datetime]

    model_config = {"from_attributes": True}


class SlotsDatesResponse(BaseModel):
    """Days in a range that have at least one bookable slot."""
    business_id: int
    service_id: int
    start_date: date
    end_date: date
    dates_with_slots: list[date]
    horizon_days: int
