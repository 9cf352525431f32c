# backend/appointly/services/slots/__init__.py
"""
Slots calculation module.

Level 1: Base day slots (cached in Redis Sorted Sets)
Level 2: Service availability (calculated on-the-fly)
"""

from .config import SlotsConfig, get_slots_config
from .calculator import calculate_day_slots
from .redis_store import SlotsRedisStore
from .invalidator import invalidate_business_cache
from .availability import (
    calculate_dates_with_slots,
    calculate_service_availability,
    generate_time_slots,
)
from .alternatives import AlternativeSlot, find_alternative_slots

__all__ = [
    "SlotsConfig",
    "get_slots_config",
    "calculate_day_slots",
    "SlotsRedisStore",
    "invalidate_business_cache",
    "calculate_dates_with_slots",
    "calculate_service_availability",
    "generate_time_slots",
    "AlternativeSlot",
    "find_alternative_slots",
]
