# backend/appointly/services/slots/availability.py
"""
Level 2: Service availability calculation.

Calculates bookable start times for a service on a specific day.

Takes into account:
- Base day slots (Level 1, cached in Redis Sorted Set)
- Service duration (the appointment must end by closing time)
- Existing bookings in scope, widened by the business booking buffer
"""

import logging
from datetime import date, datetime, timedelta

from redis import Redis, RedisError
from sqlalchemy.orm import Session

from ...models.generated import Business, Services
from ..booking_scope import load_existing_intervals, resolve_booking_location, service_padding
from ..policy import Interval, has_conflict, resolve_availability
from .calculator import calculate_day_slots, day_bounds
from .config import SlotsConfig, get_slots_config, time_str_to_minutes
from .redis_store import SlotsRedisStore

logger = logging.getLogger(__name__)


def bookable_start_times(
    target_date: date,
    base_times: list[str],
    close_dt: datetime,
    duration_minutes: int,
    existing: list[Interval],
    buffer_minutes: int = 0,
    padding_before: int = 0,
    padding_after: int = 0,
) -> list[datetime]:
    """
    Filter base "HH:MM" times down to starts that fit and do not conflict.

    Existing intervals are widened by buffer_minutes on both sides. Each
    candidate is checked as [start - padding_before, end + padding_after),
    the interval the booking would occupy with service buffers; only the
    unpadded end has to fit before close.
    """
    buffer = timedelta(minutes=buffer_minutes or 0)
    blocked = [Interval(i.start - buffer, i.end + buffer) for i in existing]
    day_start = datetime.combine(target_date, datetime.min.time())
    duration = timedelta(minutes=duration_minutes)
    before = timedelta(minutes=padding_before)
    after = timedelta(minutes=padding_after)

    result = []
    for time_str in base_times:
        start = day_start + timedelta(minutes=time_str_to_minutes(time_str))
        end = start + duration
        if end > close_dt:
            continue
        if has_conflict(Interval(start - before, end + after), blocked):
            continue
        result.append(start)

    return result


def generate_time_slots(
    weekly,
    target_date: date,
    duration_minutes: int,
    existing: list[Interval],
    minimum_advance_hours: int,
    buffer_minutes: int,
    now: datetime,
    config: SlotsConfig | None = None,
    padding_before: int = 0,
    padding_after: int = 0,
) -> list[datetime]:
    """Bookable starts for a day, computed without any cache."""
    config = config or get_slots_config()

    bounds = day_bounds(resolve_availability(weekly, target_date), target_date)
    if bounds is None:
        return []

    base = calculate_day_slots(weekly, target_date, minimum_advance_hours, now, config)
    return bookable_start_times(
        target_date,
        [time_str for time_str, _ in base],
        bounds[1],
        duration_minutes,
        existing,
        buffer_minutes,
        padding_before,
        padding_after,
    )


def calculate_service_availability(
    db: Session,
    business: Business,
    service: Services,
    target_date: date,
    now: datetime,
    location_id: int | None = None,
    config: SlotsConfig | None = None,
    redis: Redis | None = None,
) -> dict:
    """
    Calculate bookable time slots for a service.

    Returns:
        Dict with available times (for SlotsDayResponse).
    """
    config = config or get_slots_config()
    scope_location_id = resolve_booking_location(location_id, service)

    times = _bookable_times_for_dates(
        db, business, service, [target_date], now, scope_location_id, config, redis
    )[target_date]

    return {
        "business_id": business.id,
        "service_id": service.id,
        "location_id": scope_location_id,
        "date": target_date,
        "service_duration_min": service.duration,
        "available_times": times,
    }


def calculate_dates_with_slots(
    db: Session,
    business: Business,
    service: Services,
    start_date: date,
    end_date: date,
    now: datetime,
    location_id: int | None = None,
    config: SlotsConfig | None = None,
    redis: Redis | None = None,
) -> list[date]:
    """Dates in [start_date, end_date] with at least one bookable slot."""
    config = config or get_slots_config()
    scope_location_id = resolve_booking_location(location_id, service)

    dates = []
    current = start_date
    while current <= end_date:
        dates.append(current)
        current += timedelta(days=1)

    per_day = _bookable_times_for_dates(
        db, business, service, dates, now, scope_location_id, config, redis
    )
    return [dt for dt in dates if per_day[dt]]


# ── Base times (Level 1 with cache) ─────────────────────────────────────


def _bookable_times_for_dates(
    db: Session,
    business: Business,
    service: Services,
    dates: list[date],
    now: datetime,
    location_id: int | None,
    config: SlotsConfig,
    redis: Redis | None,
) -> dict[date, list[datetime]]:
    if not dates:
        return {}

    weekly = business.availability
    base_by_date = _get_base_times(
        business.id, weekly, dates, business.minimum_advance_booking_hours or 0,
        now, config, redis,
    )

    range_start = datetime.combine(dates[0], datetime.min.time())
    range_end = datetime.combine(dates[-1], datetime.min.time()) + timedelta(days=1)
    existing = load_existing_intervals(
        db, business.id, location_id, range_start, range_end
    )
    padding_before, padding_after = service_padding(service)

    result: dict[date, list[datetime]] = {}
    for dt in dates:
        bounds = day_bounds(resolve_availability(weekly, dt), dt)
        if bounds is None:
            result[dt] = []
            continue
        result[dt] = bookable_start_times(
            dt,
            base_by_date[dt],
            bounds[1],
            service.duration,
            existing,
            business.booking_buffer_minutes or 0,
            padding_before,
            padding_after,
        )
    return result


def _get_base_times(
    business_id: int,
    weekly,
    dates: list[date],
    minimum_advance_hours: int,
    now: datetime,
    config: SlotsConfig,
    redis: Redis | None,
) -> dict[date, list[str]]:
    """Get base times per date, using Redis cache when available."""
    if redis is not None:
        store = SlotsRedisStore(redis, config)
        try:
            cached = store.read_days(business_id, dates, now)
        except RedisError as e:
            logger.warning(f"Slots cache read failed for business={business_id}: {e}")
            cached = {}

        result: dict[date, list[str]] = {}
        to_store: dict[date, list[tuple[str, float]]] = {}
        for dt in dates:
            times = cached.get(dt)
            if times is None:
                # Cache miss: calculate and store
                slots = calculate_day_slots(weekly, dt, minimum_advance_hours, now, config)
                to_store[dt] = slots
                times = [time_str for time_str, _ in slots]
            result[dt] = times

        if to_store:
            try:
                store.write_days(business_id, to_store)
            except RedisError as e:
                logger.warning(f"Slots cache write failed for business={business_id}: {e}")
        return result

    # No Redis: calculate on the fly
    return {
        dt: [
            time_str
            for time_str, _ in calculate_day_slots(weekly, dt, minimum_advance_hours, now, config)
        ]
        for dt in dates
    }
