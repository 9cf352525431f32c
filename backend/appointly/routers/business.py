# backend/appointly/routers/business.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..redis_client import get_redis
from ..models.generated import Business as DBBusiness
from ..schemas.business import (
    BookingRulesRead,
    BookingRulesUpdate,
    BusinessCreate,
    BusinessRead,
)
from ..services.slots import invalidate_business_cache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/business", tags=["business"])


def _get_business(db: Session, business_id: int) -> DBBusiness:
    obj = db.get(DBBusiness, business_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Business not found")
    return obj


@router.post("/", response_model=BusinessRead, status_code=status.HTTP_201_CREATED)
def create_business(data: BusinessCreate, db: Session = Depends(get_db)):
    obj = DBBusiness(**data.model_dump())
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@router.get("/{business_id}", response_model=BusinessRead)
def get_business(business_id: int, db: Session = Depends(get_db)):
    return _get_business(db, business_id)


@router.get("/{business_id}/booking-rules", response_model=BookingRulesRead)
def get_booking_rules(business_id: int, db: Session = Depends(get_db)):
    return _get_business(db, business_id)


@router.put("/{business_id}/booking-rules", response_model=BookingRulesRead)
def put_booking_rules(
    business_id: int,
    data: BookingRulesUpdate,
    db: Session = Depends(get_db),
    redis: Optional[Redis] = Depends(get_redis),
):
    """
    Update booking rules.

    A changed minimum advance shifts every cached slot expiry, so the
    base slot cache is dropped.
    """
    obj = _get_business(db, business_id)
    previous_advance = obj.minimum_advance_booking_hours

    for field, value in data.model_dump().items():
        setattr(obj, field, value)

    db.commit()
    db.refresh(obj)

    logger.info(
        f"Booking rules updated: business_id={business_id}, "
        f"advance={obj.minimum_advance_booking_hours}h, "
        f"cancellation={obj.cancellation_policy_hours}h, "
        f"buffer={obj.booking_buffer_minutes}min"
    )

    if obj.minimum_advance_booking_hours != previous_advance:
        invalidate_business_cache(redis, business_id)

    return obj
