# backend/appointly/services/slots/alternatives.py
"""
Alternative slot suggestions offered when a requested time conflicts.

Free slots on the requested day are ranked by proximity:
    score = 100 - minutes_away / 10
          + 10 if both are in the same half of the day (before/after noon)
          + 20 if on the same calendar day
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..policy import Interval
from .availability import generate_time_slots
from .config import SlotsConfig, get_slots_config


@dataclass(frozen=True)
class AlternativeSlot:
    start: datetime
    end: datetime
    reason: str
    score: float

    def format(self) -> dict:
        return {
            "display": f"{self.start:%A, %B} {self.start.day} at {_clock(self.start)}",
            "value": self.start.isoformat(),
            "reason": self.reason,
        }


def _clock(dt: datetime) -> str:
    """12-hour clock, "2:30 PM"."""
    return dt.strftime("%I:%M %p").lstrip("0")


def _reason(slot_start: datetime, requested_start: datetime, minutes_away: float) -> str:
    if minutes_away < 30:
        direction = "later" if slot_start > requested_start else "earlier"
        return f"Same time slot, just {round(minutes_away)} minutes {direction}"
    if minutes_away < 60:
        return f"Close alternative: {_clock(slot_start)}"
    if minutes_away < 180:
        return f"Alternative time: {_clock(slot_start)}"
    return f"Available at {_clock(slot_start)}"


def score_slot(slot_start: datetime, requested_start: datetime) -> float:
    minutes_away = abs((slot_start - requested_start).total_seconds()) / 60
    score = 100 - minutes_away / 10

    if (requested_start.hour < 12) == (slot_start.hour < 12):
        score += 10
    if slot_start.date() == requested_start.date():
        score += 20

    return max(0.0, score)


def find_alternative_slots(
    requested: Interval,
    weekly,
    existing: list[Interval],
    minimum_advance_hours: int,
    buffer_minutes: int,
    now: datetime,
    config: SlotsConfig | None = None,
    padding_before: int = 0,
    padding_after: int = 0,
) -> list[AlternativeSlot]:
    """
    Best free slots on the requested day, highest score first.

    padding_before / padding_after widen each suggestion the same way the
    conflict check widens the request, so a suggestion is never rejected
    for overlapping a neighbour through its own service buffers.

    Returns at most config.max_alternatives entries.
    """
    config = config or get_slots_config()
    duration_minutes = int(requested.duration.total_seconds() // 60)

    candidates = generate_time_slots(
        weekly,
        requested.start.date(),
        duration_minutes,
        existing,
        minimum_advance_hours,
        buffer_minutes,
        now,
        config,
        padding_before,
        padding_after,
    )

    alternatives = []
    for slot_start in candidates:
        if slot_start == requested.start:
            continue
        minutes_away = abs((slot_start - requested.start).total_seconds()) / 60
        alternatives.append(AlternativeSlot(
            start=slot_start,
            end=slot_start + timedelta(minutes=duration_minutes),
            reason=_reason(slot_start, requested.start, minutes_away),
            score=score_slot(slot_start, requested.start),
        ))

    alternatives.sort(key=lambda alt: alt.score, reverse=True)
    return alternatives[:config.max_alternatives]
