# backend/appointly/services/policy/intervals.py
"""
Interval overlap and conflict detection.

All intervals are half-open: [start, end).
Back-to-back bookings (a.end == b.start) never overlap.

The detector is scope-agnostic. Callers filter `existing` down to the
relevant business / location / day and drop cancelled bookings first.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable


@dataclass(frozen=True)
class Interval:
    """Half-open time interval [start, end)."""
    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def shifted(self, delta: timedelta) -> "Interval":
        return Interval(self.start + delta, self.end + delta)


def intervals_overlap(a: Interval, b: Interval) -> bool:
    """True iff the two half-open intervals share at least one instant."""
    return a.start < b.end and b.start < a.end


def has_conflict(candidate: Interval, existing: Iterable[Interval]) -> bool:
    """True iff `candidate` overlaps any interval in `existing`."""
    return any(intervals_overlap(candidate, other) for other in existing)


def find_conflicts(candidate: Interval, existing: Iterable[Interval]) -> list[Interval]:
    """Return the intervals from `existing` that overlap `candidate`."""
    return [other for other in existing if intervals_overlap(candidate, other)]


def occupied_interval(
    start: datetime,
    end: datetime,
    buffer_before_minutes: int = 0,
    buffer_after_minutes: int = 0,
) -> Interval:
    """
    Effective interval a booking occupies, widened by service buffers.

    With zero buffers this is just [start, end).
    """
    return Interval(
        start - timedelta(minutes=buffer_before_minutes or 0),
        end + timedelta(minutes=buffer_after_minutes or 0),
    )
