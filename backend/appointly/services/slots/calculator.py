# backend/appointly/services/slots/calculator.py
"""
Level 1: Base day slot calculation.

Produces per-slot data:
  (time_str "HH:MM", expire_ts float)

expire_ts = (slot_datetime − minimum_advance_booking_hours).timestamp()
Redis filters with ZRANGEBYSCORE {now_ts} +inf, so dead slots drop automatically.

Contains:
✓ weekly availability of the business
✓ minimum_advance_booking_hours (baked into expire_ts)

Does NOT contain:
✗ Bookings (checked at Level 2)
✗ Service duration fit (checked at Level 2)
"""

from datetime import date, datetime, timedelta

from ..policy import CLOSED, UNRESTRICTED, DayWindow, resolve_availability
from ..policy.availability import Resolution
from .config import SlotsConfig, get_slots_config, minutes_to_time_str


def day_bounds(resolution: Resolution, target_date: date) -> tuple[datetime, datetime] | None:
    """
    Bookable (open, close) datetimes for a resolved day.

    UNRESTRICTED spans the whole day; CLOSED has no bounds.
    """
    if resolution is CLOSED:
        return None
    if resolution is UNRESTRICTED:
        day_start = datetime.combine(target_date, datetime.min.time())
        return day_start, day_start + timedelta(days=1)
    if isinstance(resolution, DayWindow):
        return resolution.bounds(target_date)
    return None


def calculate_day_slots(
    weekly,
    target_date: date,
    minimum_advance_hours: int,
    now: datetime,
    config: SlotsConfig | None = None,
) -> list[tuple[str, float]]:
    """
    Calculate base slots for a business on a specific date.

    Returns:
        List of (time_str, expire_ts) pairs. Empty list = no slots.
    """
    config = config or get_slots_config()
    now_ts = now.timestamp()

    bounds = day_bounds(resolve_availability(weekly, target_date), target_date)
    if bounds is None:
        return []

    open_dt, close_dt = bounds
    day_start = datetime.combine(target_date, datetime.min.time())
    step = timedelta(minutes=config.slot_step_minutes)
    lead = timedelta(hours=minimum_advance_hours or 0)

    slots: list[tuple[str, float]] = []
    slot_dt = open_dt
    while slot_dt < close_dt:
        expire_ts = (slot_dt - lead).timestamp()
        if expire_ts >= now_ts:
            minutes = int((slot_dt - day_start).total_seconds() // 60)
            slots.append((minutes_to_time_str(minutes), expire_ts))
        slot_dt += step

    return slots
