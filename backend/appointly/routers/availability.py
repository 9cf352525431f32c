# backend/appointly/routers/availability.py
# GET = weekly hours (configured=false when never set), PUT = upsert + cache invalidation

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..redis_client import get_redis
from ..models.generated import (
    Availability as DBAvailability,
    Business as DBBusiness,
)
from ..schemas.availability import AvailabilityRead, WeeklyAvailability
from ..services.policy import WEEKDAY_NAMES
from ..services.slots import invalidate_business_cache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/availability", tags=["availability"])


def _to_read(business_id: int, obj: Optional[DBAvailability]) -> AvailabilityRead:
    if obj is None:
        return AvailabilityRead(business_id=business_id, configured=False)
    return AvailabilityRead(
        business_id=business_id,
        configured=True,
        **{day: getattr(obj, day) for day in WEEKDAY_NAMES},
    )


@router.get("/{business_id}", response_model=AvailabilityRead)
def get_availability(business_id: int, db: Session = Depends(get_db)):
    business = db.get(DBBusiness, business_id)
    if not business:
        raise HTTPException(status_code=404, detail="Business not found")
    return _to_read(business_id, business.availability)


@router.put("/{business_id}", response_model=AvailabilityRead)
def put_availability(
    business_id: int,
    data: WeeklyAvailability,
    db: Session = Depends(get_db),
    redis: Optional[Redis] = Depends(get_redis),
):
    """
    Replace the weekly hours.

    Days omitted from the body are stored as null and resolve to closed.
    """
    business = db.get(DBBusiness, business_id)
    if not business:
        raise HTTPException(status_code=404, detail="Business not found")

    obj = business.availability
    if obj is None:
        obj = DBAvailability(business_id=business_id)
        db.add(obj)

    days = data.model_dump()
    for day in WEEKDAY_NAMES:
        setattr(obj, day, days[day])

    db.commit()
    db.refresh(obj)

    logger.info(f"Availability updated: business_id={business_id}")
    invalidate_business_cache(redis, business_id)

    return _to_read(business_id, obj)
