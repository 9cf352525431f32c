# backend/appointly/routers/bookings.py
# POST = guarded create, PATCH = status change / reschedule, DELETE = 405

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..redis_client import get_redis
from ..models.generated import (
    Bookings as DBBookings,
    Business as DBBusiness,
    Locations as DBLocations,
    Services as DBServices,
)
from ..schemas.bookings import (
    BookingCreate,
    BookingRead,
    BookingStatus,
    BookingUpdate,
)
from ..services.booking_guard import (
    BookingRejected,
    check_booking_slot,
    check_cancellation,
    check_no_conflict,
    check_reschedulable,
)
from ..services.booking_scope import (
    booking_interval,
    load_existing_intervals,
    resolve_booking_location,
)
from ..services.events import emit_event
from ..services.policy import BookingRules, Interval
from ..services.reservation import BusinessNotFound, business_reservation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


def to_naive(value: datetime) -> datetime:
    """Aware datetimes are converted to naive local time, like datetime.now()."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def rejected(e: BookingRejected) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.to_response())


@router.get("/", response_model=list[BookingRead])
def list_bookings(
    business_id: int,
    booking_status: Optional[BookingStatus] = Query(None, alias="status"),
    on_date: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
):
    query = db.query(DBBookings).filter(DBBookings.business_id == business_id)

    if booking_status:
        query = query.filter(DBBookings.status == booking_status)

    if on_date:
        day_start = datetime.combine(on_date, datetime.min.time())
        query = query.filter(
            DBBookings.start_time >= day_start,
            DBBookings.start_time < day_start + timedelta(days=1),
        )

    return query.order_by(DBBookings.start_time).all()


@router.get("/{id}", response_model=BookingRead)
def get_booking(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBBookings, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Booking not found")
    return obj


@router.post("/", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    redis: Optional[Redis] = Depends(get_redis),
):
    """
    Create a booking.

    Steps:
    1. Validate business, service and location
    2. Lock the business and load bookings in scope
    3. Check past / availability / advance notice / conflicts
    4. Insert as PENDING
    """
    now = datetime.now()

    if not db.get(DBBusiness, data.business_id):
        raise HTTPException(status_code=404, detail="Business not found")

    service = (
        db.query(DBServices)
        .filter(
            DBServices.id == data.service_id,
            DBServices.business_id == data.business_id,
            DBServices.is_active.is_(True),
        )
        .first()
    )
    if not service:
        raise HTTPException(status_code=404, detail="Service not found or inactive")

    if data.location_id is not None:
        location = db.get(DBLocations, data.location_id)
        if not location or location.business_id != data.business_id or not location.is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Location not found or inactive",
            )
    location_id = resolve_booking_location(data.location_id, service)

    start_time = to_naive(data.start_time)
    candidate = Interval(start_time, start_time + timedelta(minutes=service.duration))
    occupied = booking_interval(candidate.start, candidate.end, service)

    try:
        with business_reservation(db, data.business_id) as business:
            existing = load_existing_intervals(
                db, business.id, location_id, occupied.start, occupied.end
            )
            check_booking_slot(
                candidate,
                business.availability,
                BookingRules.from_business(business),
                existing,
                now,
                occupied=occupied,
            )
            obj = DBBookings(
                business_id=business.id,
                service_id=service.id,
                location_id=location_id,
                customer_name=data.customer_name,
                customer_email=data.customer_email,
                customer_phone=data.customer_phone,
                start_time=candidate.start,
                end_time=candidate.end,
                notes=data.notes,
                status="PENDING",
            )
            db.add(obj)
    except BookingRejected as e:
        raise rejected(e)
    except BusinessNotFound:
        raise HTTPException(status_code=404, detail="Business not found")

    db.refresh(obj)

    logger.info(
        f"Booking created: booking_id={obj.id}, business_id={obj.business_id}, "
        f"service={service.name}, location_id={location_id}, "
        f"time={obj.start_time:%Y-%m-%d %H:%M}"
    )
    emit_event(redis, "booking_created", {"booking_id": obj.id, "business_id": obj.business_id})

    return obj


@router.patch("/{id}", response_model=BookingRead)
def update_booking(
    id: int,
    data: BookingUpdate,
    db: Session = Depends(get_db),
    redis: Optional[Redis] = Depends(get_redis),
):
    """
    Change status and/or reschedule.

    - CANCELLED is subject to the cancellation policy (not re-checked when
      already cancelled)
    - a new start_time goes through the same checks as a new booking,
      ignoring the booking itself
    - a cancelled booking brought back must not overlap anything
    """
    now = datetime.now()

    obj = db.get(DBBookings, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Booking not found")

    changes = data.model_dump(exclude_unset=True)
    previous_status = obj.status
    previous_start = obj.start_time
    new_status = changes.pop("status", None) or previous_status
    new_start = changes.pop("start_time", None)
    if new_start is not None:
        new_start = to_naive(new_start)
        if new_start == previous_start:
            new_start = None

    try:
        with business_reservation(db, obj.business_id) as business:
            rules = BookingRules.from_business(business)
            service = obj.service

            check_cancellation(previous_status, new_status, previous_start, rules, now)

            if new_start is not None:
                check_reschedulable(previous_status)
                check_reschedulable(new_status)
                candidate = Interval(new_start, new_start + timedelta(minutes=service.duration))
                occupied = booking_interval(candidate.start, candidate.end, service)
                # Conflict scope stays the stored location, even if the
                # service has moved since the booking was made
                existing = load_existing_intervals(
                    db, business.id, obj.location_id, occupied.start, occupied.end,
                    exclude_booking_id=obj.id,
                )
                check_booking_slot(
                    candidate,
                    business.availability,
                    rules,
                    existing,
                    now,
                    occupied=occupied,
                )
                obj.start_time, obj.end_time = candidate.start, candidate.end

            elif previous_status == "CANCELLED" and new_status != "CANCELLED":
                occupied = booking_interval(obj.start_time, obj.end_time, service)
                existing = load_existing_intervals(
                    db, business.id, obj.location_id, occupied.start, occupied.end,
                    exclude_booking_id=obj.id,
                )
                check_no_conflict(occupied, existing)

            obj.status = new_status
            for field, value in changes.items():
                setattr(obj, field, value)
            obj.updated_at = now
    except BookingRejected as e:
        raise rejected(e)
    except BusinessNotFound:
        raise HTTPException(status_code=404, detail="Business not found")

    db.refresh(obj)

    if new_start is not None:
        logger.info(
            f"Booking rescheduled: booking_id={obj.id}, "
            f"{previous_start:%Y-%m-%d %H:%M} → {obj.start_time:%Y-%m-%d %H:%M}"
        )
        emit_event(redis, "booking_rescheduled", {
            "booking_id": obj.id,
            "previous_start_time": previous_start.isoformat(),
        })

    if new_status != previous_status:
        logger.info(f"Booking status changed: booking_id={obj.id}, {previous_status} → {new_status}")
        event_type = "booking_cancelled" if new_status == "CANCELLED" else "booking_status_changed"
        emit_event(redis, event_type, {
            "booking_id": obj.id,
            "previous_status": previous_status,
            "status": new_status,
        })

    return obj


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
