# backend/appointly/services/booking_scope.py
"""
Loading the bookings a candidate must be checked against.

Scope rules:
- same business
- non-cancelled (recurring generation also ignores NO_SHOW)
- overlapping the requested time window
- location: a location-specific candidate sees bookings at that location
  plus business-wide bookings (location_id IS NULL); a business-wide
  candidate sees only other business-wide bookings
"""

from datetime import datetime, timedelta

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ..config import settings
from ..models.generated import Bookings, Services
from .policy import Interval, occupied_interval

INACTIVE_STATUSES = ("CANCELLED",)

# Widens the SQL window so buffered neighbours are still loaded
QUERY_MARGIN = timedelta(days=1)


def resolve_booking_location(requested_location_id: int | None, service: Services) -> int | None:
    """Explicit location, else the service's own location, else business-wide."""
    if requested_location_id is not None:
        return requested_location_id
    return service.location_id


def load_existing_bookings(
    db: Session,
    business_id: int,
    location_id: int | None,
    window_start: datetime,
    window_end: datetime,
    exclude_booking_id: int | None = None,
    inactive_statuses: tuple[str, ...] = INACTIVE_STATUSES,
) -> list[Bookings]:
    """In-scope bookings around [window_start, window_end), ordered by start."""
    query = (
        db.query(Bookings)
        .options(joinedload(Bookings.service))
        .filter(
            Bookings.business_id == business_id,
            Bookings.status.notin_(inactive_statuses),
            Bookings.start_time < window_end + QUERY_MARGIN,
            Bookings.end_time > window_start - QUERY_MARGIN,
        )
    )

    if location_id is not None:
        query = query.filter(
            or_(Bookings.location_id == location_id, Bookings.location_id.is_(None))
        )
    else:
        query = query.filter(Bookings.location_id.is_(None))

    if exclude_booking_id is not None:
        query = query.filter(Bookings.id != exclude_booking_id)

    return query.order_by(Bookings.start_time).all()


def service_padding(
    service: Services | None,
    include_service_buffers: bool | None = None,
) -> tuple[int, int]:
    """(before, after) minutes a booking of `service` occupies around itself."""
    if include_service_buffers is None:
        include_service_buffers = settings.conflict_includes_service_buffers

    if include_service_buffers and service is not None:
        return service.buffer_time_before or 0, service.buffer_time_after or 0
    return 0, 0


def booking_interval(
    start: datetime,
    end: datetime,
    service: Services | None,
    include_service_buffers: bool | None = None,
) -> Interval:
    """Interval a booking occupies for conflict purposes."""
    before, after = service_padding(service, include_service_buffers)
    return occupied_interval(start, end, before, after)


def load_existing_intervals(
    db: Session,
    business_id: int,
    location_id: int | None,
    window_start: datetime,
    window_end: datetime,
    exclude_booking_id: int | None = None,
    inactive_statuses: tuple[str, ...] = INACTIVE_STATUSES,
    include_service_buffers: bool | None = None,
) -> list[Interval]:
    """Intervals of in-scope bookings, ready for the conflict detector."""
    bookings = load_existing_bookings(
        db,
        business_id,
        location_id,
        window_start,
        window_end,
        exclude_booking_id=exclude_booking_id,
        inactive_statuses=inactive_statuses,
    )
    return [
        booking_interval(b.start_time, b.end_time, b.service, include_service_buffers)
        for b in bookings
    ]
