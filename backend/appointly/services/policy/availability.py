# backend/appointly/services/policy/availability.py
"""
Weekly availability resolution.

Stored format (one JSON value per weekday):
    {"monday": {"open": "09:00", "close": "17:00", "isOpen": true}, ...}

Three outcomes for a date:
✓ DayWindow    open, with open/close times
✓ CLOSED       day missing, isOpen false, or open/close unusable
✓ UNRESTRICTED business has no availability configured at all

UNRESTRICTED is not CLOSED: a business that never set hours can be booked
at any time.
"""

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Mapping, Union

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class DayStatus(Enum):
    CLOSED = "closed"
    UNRESTRICTED = "unrestricted"


CLOSED = DayStatus.CLOSED
UNRESTRICTED = DayStatus.UNRESTRICTED


@dataclass(frozen=True)
class DayWindow:
    """Open hours for a single calendar day."""
    open: time
    close: time

    def bounds(self, target_date: date) -> tuple[datetime, datetime]:
        """Concrete (open, close) datetimes on target_date."""
        return (
            datetime.combine(target_date, self.open),
            datetime.combine(target_date, self.close),
        )

    def contains(self, start: datetime, end: datetime) -> bool:
        """True iff [start, end) lies inside the window on start's date."""
        open_dt, close_dt = self.bounds(start.date())
        return open_dt <= start and end <= close_dt

    def format(self) -> dict:
        return {
            "open": self.open.strftime("%H:%M"),
            "close": self.close.strftime("%H:%M"),
        }


Resolution = Union[DayWindow, DayStatus]


def parse_time_of_day(value: Any) -> time | None:
    """Parse "HH:MM" into a time. Returns None for anything else."""
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        return None
    try:
        hours, minutes = value.strip().split(":")[:2]
        return time(int(hours), int(minutes))
    except (ValueError, TypeError):
        return None


def parse_weekly_availability(raw: Any) -> dict[str, Any] | None:
    """
    Normalise stored availability into {weekday_name: day_entry}.

    Accepts a dict, a JSON string, or an object with weekday attributes
    (the ORM row). Returns None when nothing usable is configured, which
    callers must treat as "no restriction".
    """
    if raw is None:
        return None

    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Unparseable availability JSON, treating as unconfigured")
            return None

    if isinstance(raw, Mapping):
        return {name: raw.get(name) for name in WEEKDAY_NAMES}

    if all(hasattr(raw, name) for name in WEEKDAY_NAMES):
        return {name: getattr(raw, name) for name in WEEKDAY_NAMES}

    logger.warning(f"Unsupported availability type {type(raw).__name__}, treating as unconfigured")
    return None


def resolve_availability(weekly: Any, target_date: date) -> Resolution:
    """
    Resolve the open window for target_date.

    Args:
        weekly: Weekly availability (see parse_weekly_availability), or None.
        target_date: Calendar date, time-zone naive.

    Returns:
        DayWindow when open, CLOSED when closed that day,
        UNRESTRICTED when no availability is configured.
    """
    schedule = parse_weekly_availability(weekly)
    if schedule is None:
        return UNRESTRICTED

    day_entry = schedule.get(WEEKDAY_NAMES[target_date.weekday()])
    if not isinstance(day_entry, Mapping):
        return CLOSED

    if not day_entry.get("isOpen"):
        return CLOSED

    open_time = parse_time_of_day(day_entry.get("open"))
    close_time = parse_time_of_day(day_entry.get("close"))
    if open_time is None or close_time is None:
        return CLOSED

    if close_time <= open_time:
        return CLOSED

    return DayWindow(open=open_time, close=close_time)


def is_closed(resolution: Resolution) -> bool:
    return resolution is CLOSED
