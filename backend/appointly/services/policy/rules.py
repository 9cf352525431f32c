# backend/appointly/services/policy/rules.py
"""
Per-business booking rules and the time-based policy predicates.

Every predicate takes `now` explicitly; nothing here reads the clock.
A rule value of 0 disables the restriction.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

MAX_ADVANCE_BOOKING_HOURS = 168  # 7 days
MAX_CANCELLATION_POLICY_HOURS = 720  # 30 days
MAX_BOOKING_BUFFER_MINUTES = 120


@dataclass(frozen=True)
class BookingRules:
    """
    Booking rules configured by the business owner.

    Attributes:
        minimum_advance_booking_hours: Lead time between now and a new start
        cancellation_policy_hours: Lead time required to cancel
        booking_buffer_minutes: Gap kept around existing bookings when
            offering slots
    """
    minimum_advance_booking_hours: int = 0
    cancellation_policy_hours: int = 0
    booking_buffer_minutes: int = 0

    def __post_init__(self):
        """Validate ranges."""
        _check_range(
            "minimum_advance_booking_hours",
            self.minimum_advance_booking_hours,
            MAX_ADVANCE_BOOKING_HOURS,
        )
        _check_range(
            "cancellation_policy_hours",
            self.cancellation_policy_hours,
            MAX_CANCELLATION_POLICY_HOURS,
        )
        _check_range(
            "booking_buffer_minutes",
            self.booking_buffer_minutes,
            MAX_BOOKING_BUFFER_MINUTES,
        )

    @classmethod
    def from_business(cls, business) -> "BookingRules":
        """Build rules from a Business row (None columns count as 0)."""
        return cls(
            minimum_advance_booking_hours=business.minimum_advance_booking_hours or 0,
            cancellation_policy_hours=business.cancellation_policy_hours or 0,
            booking_buffer_minutes=business.booking_buffer_minutes or 0,
        )


def _check_range(name: str, value: int, maximum: int) -> None:
    if not 0 <= value <= maximum:
        raise ValueError(f"{name} must be between 0 and {maximum}, got {value}")


# ── Advance booking ──────────────────────────────────────────────────────


def earliest_allowed_start(now: datetime, minimum_advance_hours: float) -> datetime:
    """First instant a new appointment may start."""
    return now + timedelta(hours=minimum_advance_hours)


def is_advance_booking_allowed(
    now: datetime,
    candidate_start: datetime,
    minimum_advance_hours: float,
) -> bool:
    """True iff candidate_start >= now + minimum_advance_hours."""
    if not minimum_advance_hours:
        return True
    return candidate_start >= earliest_allowed_start(now, minimum_advance_hours)


# ── Cancellation ─────────────────────────────────────────────────────────


def cancellation_deadline(
    appointment_start: datetime,
    cancellation_policy_hours: float,
) -> datetime:
    """Last instant a cancellation is accepted."""
    return appointment_start - timedelta(hours=cancellation_policy_hours)


def is_cancellation_allowed(
    now: datetime,
    appointment_start: datetime,
    cancellation_policy_hours: float,
) -> bool:
    """
    True iff cancellation is still permitted at `now`.

    0 hours: always allowed. Otherwise allowed up to and including
    appointment_start - cancellation_policy_hours.
    """
    if not cancellation_policy_hours:
        return True
    return now <= cancellation_deadline(appointment_start, cancellation_policy_hours)
