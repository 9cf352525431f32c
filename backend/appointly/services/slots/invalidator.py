# backend/appointly/services/slots/invalidator.py
"""
Cache invalidation for base day slots.

Triggers:
✓ Weekly availability changed → invalidate all dates
✓ minimum_advance_booking_hours changed → invalidate all dates

Does NOT trigger:
✗ Booking created/cancelled/rescheduled (Level 2 calculates on-the-fly)
✗ Service duration changed (Level 2)
"""

import logging
from datetime import date

from redis import Redis, RedisError

from .redis_store import SlotsRedisStore

logger = logging.getLogger(__name__)


def invalidate_business_cache(
    redis: Redis | None,
    business_id: int,
    dates: list[date] | None = None,
) -> int:
    """
    Invalidate cached base slots for a business.

    Args:
        redis: Redis client, or None when caching is disabled
        business_id: Business ID
        dates: Specific dates to invalidate, or None for all cached dates

    Returns:
        Number of deleted cache keys
    """
    if redis is None:
        return 0

    try:
        deleted = SlotsRedisStore(redis).drop_days(business_id, dates)
    except RedisError as e:
        logger.error(f"Failed to invalidate slots cache for business={business_id}: {e}")
        return 0

    logger.info(f"Slots cache invalidated: business={business_id}, keys={deleted}")
    return deleted
