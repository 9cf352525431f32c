# backend/appointly/services/policy/__init__.py
"""
Booking policy core.

Pure functions over value inputs: no database, no clock, no I/O.
Booking mutation endpoints compose them via services.booking_guard.
"""

from .availability import (
    CLOSED,
    WEEKDAY_NAMES,
    UNRESTRICTED,
    DayStatus,
    DayWindow,
    is_closed,
    parse_weekly_availability,
    resolve_availability,
)
from .intervals import (
    Interval,
    find_conflicts,
    has_conflict,
    intervals_overlap,
    occupied_interval,
)
from .rules import (
    BookingRules,
    cancellation_deadline,
    earliest_allowed_start,
    is_advance_booking_allowed,
    is_cancellation_allowed,
)

__all__ = [
    "CLOSED",
    "WEEKDAY_NAMES",
    "UNRESTRICTED",
    "DayStatus",
    "DayWindow",
    "is_closed",
    "parse_weekly_availability",
    "resolve_availability",
    "Interval",
    "find_conflicts",
    "has_conflict",
    "intervals_overlap",
    "occupied_interval",
    "BookingRules",
    "cancellation_deadline",
    "earliest_allowed_start",
    "is_advance_booking_allowed",
    "is_cancellation_allowed",
]
