# backend/appointly/services/slots/config.py
"""
Slot grid configuration.
"""

from dataclasses import dataclass
from functools import lru_cache

from ...config import settings


@dataclass(frozen=True)
class SlotsConfig:
    """
    Configuration for slot generation.

    Attributes:
        horizon_days: How many days ahead slots are offered
        slot_step_minutes: Grid step between candidate starts (15/30/60)
        cache_ttl_seconds: Upper bound for Redis day keys
        max_alternatives: Suggestions returned with a conflict
    """
    horizon_days: int = 60
    slot_step_minutes: int = 30
    cache_ttl_seconds: int = 86400
    max_alternatives: int = 5

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes not in (15, 30, 60):
            raise ValueError(f"slot_step_minutes must be 15, 30, or 60, got {self.slot_step_minutes}")
        if self.horizon_days < 1:
            raise ValueError(f"horizon_days must be positive, got {self.horizon_days}")

    @property
    def slots_per_day(self) -> int:
        return (24 * 60) // self.slot_step_minutes


@lru_cache
def get_slots_config() -> SlotsConfig:
    """Slots configuration (singleton), read from settings."""
    return SlotsConfig(
        horizon_days=settings.horizon_days,
        slot_step_minutes=settings.slot_step_minutes,
        cache_ttl_seconds=settings.slots_cache_ttl_seconds,
    )


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight ("09:30" → 570)."""
    hours, minutes = value.split(":")[:2]
    return int(hours) * 60 + int(minutes)


def minutes_to_time_str(total: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{total // 60:02d}:{total % 60:02d}"
