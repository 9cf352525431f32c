# backend/appointly/routers/recurring_bookings.py
# PATCH = ALLOWED (is_active / end_date / limits), DELETE = soft-delete (is_active)

import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..redis_client import get_redis
from ..models.generated import (
    Business as DBBusiness,
    RecurringBookings as DBRecurringBookings,
    Services as DBServices,
)
from ..schemas.recurring_bookings import (
    GenerateRequest,
    GenerateResponse,
    RecurringBookingCreate,
    RecurringBookingRead,
    RecurringBookingUpdate,
)
from ..services.recurring import generate_bookings_from_recurring
from ..services.slots import get_slots_config

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recurring-bookings", tags=["recurring-bookings"])


@router.get("/", response_model=list[RecurringBookingRead])
def list_recurring_bookings(
    business_id: int,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
):
    query = db.query(DBRecurringBookings).filter(DBRecurringBookings.business_id == business_id)
    if not include_inactive:
        query = query.filter(DBRecurringBookings.is_active.is_(True))
    return query.order_by(DBRecurringBookings.created_at.desc()).all()


@router.post("/", response_model=RecurringBookingRead, status_code=status.HTTP_201_CREATED)
def create_recurring_booking(
    data: RecurringBookingCreate,
    db: Session = Depends(get_db),
):
    if not db.get(DBBusiness, data.business_id):
        raise HTTPException(status_code=404, detail="Business not found")

    service = db.get(DBServices, data.service_id)
    if not service or service.business_id != data.business_id or not service.is_active:
        raise HTTPException(status_code=404, detail="Service not found or inactive")

    obj = DBRecurringBookings(**data.model_dump())
    db.add(obj)
    db.commit()
    db.refresh(obj)

    logger.info(
        f"Recurring booking created: id={obj.id}, business_id={obj.business_id}, "
        f"{obj.frequency} at {obj.start_time} from {obj.start_date}"
    )
    return obj


@router.patch("/{id}", response_model=RecurringBookingRead)
def update_recurring_booking(
    id: int,
    data: RecurringBookingUpdate,
    db: Session = Depends(get_db),
):
    obj = db.get(DBRecurringBookings, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(obj, field, value)

    if obj.end_date is not None and obj.end_date < obj.start_date:
        db.rollback()
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")

    db.commit()
    db.refresh(obj)
    return obj


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_recurring_booking(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBRecurringBookings, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")

    obj.is_active = False
    db.commit()


@router.post("/generate", response_model=GenerateResponse)
def generate_recurring_bookings(
    data: GenerateRequest,
    db: Session = Depends(get_db),
    redis: Optional[Redis] = Depends(get_redis),
):
    """
    Materialise upcoming occurrences.

    Occurrences that are in the past, outside business hours, too short
    notice or conflicting are skipped and counted.
    """
    if not db.get(DBBusiness, data.business_id):
        raise HTTPException(status_code=404, detail="Business not found")

    now = datetime.now()
    up_to = data.up_to
    if up_to is None:
        up_to = now + timedelta(days=get_slots_config().horizon_days)
    elif up_to.tzinfo is not None:
        up_to = up_to.astimezone().replace(tzinfo=None)

    result = generate_bookings_from_recurring(
        db,
        now=now,
        up_to=up_to,
        recurring_id=data.recurring_id,
        business_id=data.business_id,
        redis=redis,
    )

    return GenerateResponse(
        success=result["errors"] == 0,
        created=result["created"],
        skipped=result["skipped"],
        errors=result["errors"],
        message=(
            f"Generated {result['created']} booking(s), "
            f"skipped {result['skipped']}, errors {result['errors']}"
        ),
    )
