# backend/appointly/services/booking_guard.py
"""
Booking mutation checks.

Composes the policy predicates for create / reschedule / recurring
generation, and the cancellation rule for status changes.

Check order (cheapest first, decides which error a caller sees):
    1. start not in the past
    2. business open that day and the appointment fits the window
    3. minimum advance notice
    4. conflicts with existing bookings in scope

Violations raise BookingRejected subclasses. Each carries a user-facing
`detail` and structured context for the API response.
"""

import logging
from datetime import datetime, timedelta

from .policy import (
    CLOSED,
    BookingRules,
    DayWindow,
    Interval,
    cancellation_deadline,
    earliest_allowed_start,
    find_conflicts,
    is_advance_booking_allowed,
    is_cancellation_allowed,
    resolve_availability,
)
from .slots import AlternativeSlot, find_alternative_slots
from .slots.config import SlotsConfig

logger = logging.getLogger(__name__)

RESCHEDULABLE_STATUSES = ("PENDING", "CONFIRMED")


class BookingRejected(Exception):
    """A booking mutation refused by policy."""
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def context(self) -> dict:
        return {}

    def to_response(self) -> dict:
        return {"error": self.detail, **self.context()}


class InvalidInterval(BookingRejected):
    pass


class BookingInPast(BookingRejected):
    def __init__(self):
        super().__init__("Cannot book in the past")


class BusinessClosed(BookingRejected):
    def __init__(self):
        super().__init__("Business is closed on this day")


class OutsideBusinessHours(BookingRejected):
    def __init__(self, window: DayWindow):
        self.window = window
        super().__init__(
            f"Appointment must be between {window.open:%H:%M} and {window.close:%H:%M}"
        )

    def context(self) -> dict:
        return {"business_hours": self.window.format()}


class AdvanceNoticeRequired(BookingRejected):
    def __init__(self, required_hours: int, earliest_start: datetime):
        self.required_hours = required_hours
        self.earliest_start = earliest_start
        plural = "" if required_hours == 1 else "s"
        super().__init__(
            f"Bookings must be made at least {required_hours} hour{plural} in advance"
        )

    def context(self) -> dict:
        return {
            "required_hours": self.required_hours,
            "earliest_start": self.earliest_start.isoformat(),
        }


class SlotConflict(BookingRejected):
    status_code = 409

    def __init__(
        self,
        conflicts: list[Interval],
        alternatives: list[AlternativeSlot] | None = None,
    ):
        self.conflicts = conflicts
        self.alternatives = alternatives or []
        super().__init__("This time slot is no longer available")

    def context(self) -> dict:
        return {
            "conflict": True,
            "conflicting_bookings": [
                {"start_time": c.start.isoformat(), "end_time": c.end.isoformat()}
                for c in self.conflicts
            ],
            "alternatives": [alt.format() for alt in self.alternatives],
        }


class CancellationWindowClosed(BookingRejected):
    def __init__(self, deadline: datetime, policy_hours: int):
        self.deadline = deadline
        self.policy_hours = policy_hours
        super().__init__(
            f"Cancellations must be made at least {policy_hours} hours before the "
            f"appointment (deadline was {deadline:%Y-%m-%d %H:%M})"
        )

    def context(self) -> dict:
        return {
            "cancellation_deadline": self.deadline.isoformat(),
            "cancellation_policy_hours": self.policy_hours,
        }


class NotReschedulable(BookingRejected):
    def __init__(self, status: str):
        super().__init__(f"Bookings with status {status} cannot be rescheduled")


# ── Checks ───────────────────────────────────────────────────────────────


def _minutes(delta: timedelta) -> int:
    return int(delta.total_seconds() // 60)


def check_booking_slot(
    candidate: Interval,
    weekly,
    rules: BookingRules,
    existing: list[Interval],
    now: datetime,
    occupied: Interval | None = None,
    suggest_alternatives: bool = True,
    config: SlotsConfig | None = None,
) -> None:
    """
    Raise BookingRejected unless `candidate` may be booked.

    Args:
        candidate: Proposed [start, end)
        weekly: Business weekly availability (None = unrestricted)
        rules: Business booking rules
        existing: In-scope, non-cancelled booking intervals
        now: Current time
        occupied: Interval used for the conflict check when it differs
            from the appointment itself (service buffers)
        suggest_alternatives: Attach free slots to a SlotConflict
    """
    if candidate.end <= candidate.start:
        raise InvalidInterval("End time must be after start time")

    if candidate.start < now:
        raise BookingInPast()

    resolution = resolve_availability(weekly, candidate.start.date())
    if resolution is CLOSED:
        raise BusinessClosed()
    if isinstance(resolution, DayWindow) and not resolution.contains(candidate.start, candidate.end):
        raise OutsideBusinessHours(resolution)

    hours = rules.minimum_advance_booking_hours
    if not is_advance_booking_allowed(now, candidate.start, hours):
        raise AdvanceNoticeRequired(hours, earliest_allowed_start(now, hours))

    occupied = occupied or candidate
    conflicts = find_conflicts(occupied, existing)
    if conflicts:
        alternatives = []
        if suggest_alternatives:
            alternatives = find_alternative_slots(
                candidate,
                weekly,
                existing,
                rules.minimum_advance_booking_hours,
                rules.booking_buffer_minutes,
                now,
                config,
                padding_before=_minutes(candidate.start - occupied.start),
                padding_after=_minutes(occupied.end - candidate.end),
            )
        logger.info(
            f"Slot conflict for {candidate.start:%Y-%m-%d %H:%M}-{candidate.end:%H:%M}: "
            f"{len(conflicts)} overlapping, {len(alternatives)} alternatives"
        )
        raise SlotConflict(conflicts, alternatives)


def check_cancellation(
    current_status: str,
    new_status: str,
    appointment_start: datetime,
    rules: BookingRules,
    now: datetime,
) -> None:
    """
    Enforce the cancellation policy on a status change.

    Only a transition into CANCELLED from another status is checked;
    re-cancelling an already cancelled booking is a no-op.
    """
    if new_status != "CANCELLED" or current_status == "CANCELLED":
        return

    hours = rules.cancellation_policy_hours
    if not is_cancellation_allowed(now, appointment_start, hours):
        raise CancellationWindowClosed(cancellation_deadline(appointment_start, hours), hours)


def check_reschedulable(current_status: str) -> None:
    if current_status not in RESCHEDULABLE_STATUSES:
        raise NotReschedulable(current_status)


def check_no_conflict(occupied: Interval, existing: list[Interval]) -> None:
    """Conflict check alone, for bookings re-entering the schedule."""
    conflicts = find_conflicts(occupied, existing)
    if conflicts:
        raise SlotConflict(conflicts)
