# backend/appointly/routers/slots.py
"""
Slots API endpoints.

GET /slots/day   - Bookable start times for a service on one day
GET /slots/dates - Days in a range with at least one bookable start
"""

from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..redis_client import get_redis
from ..models.generated import Business as DBBusiness, Services as DBServices
from ..schemas.slots import SlotsDatesResponse, SlotsDayResponse
from ..services.slots import (
    calculate_dates_with_slots,
    calculate_service_availability,
    get_slots_config,
)


router = APIRouter(prefix="/slots", tags=["slots"])


def _load(db: Session, business_id: int, service_id: int) -> tuple[DBBusiness, DBServices]:
    business = db.get(DBBusiness, business_id)
    if not business:
        raise HTTPException(status_code=404, detail="Business not found")

    service = db.get(DBServices, service_id)
    if not service or service.business_id != business_id or not service.is_active:
        raise HTTPException(status_code=404, detail="Service not found or inactive")

    return business, service


@router.get("/day", response_model=SlotsDayResponse)
def get_slots_day(
    business_id: int,
    service_id: int,
    location_id: Optional[int] = None,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    redis: Optional[Redis] = Depends(get_redis),
):
    """Get available start times for a service on a specific day."""
    config = get_slots_config()

    today = date.today()
    max_date = today + timedelta(days=config.horizon_days)

    if target_date < today:
        raise HTTPException(status_code=400, detail="Date cannot be in the past")

    if target_date > max_date:
        raise HTTPException(status_code=400, detail=f"Date cannot be more than {config.horizon_days} days ahead")

    business, service = _load(db, business_id, service_id)

    result = calculate_service_availability(
        db=db,
        business=business,
        service=service,
        target_date=target_date,
        now=datetime.now(),
        location_id=location_id,
        config=config,
        redis=redis,
    )

    return SlotsDayResponse(**result)


@router.get("/dates", response_model=SlotsDatesResponse)
def get_slots_dates(
    business_id: int,
    service_id: int,
    location_id: Optional[int] = None,
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
    redis: Optional[Redis] = Depends(get_redis),
):
    """Get days with at least one bookable slot, clamped to [today, horizon]."""
    config = get_slots_config()

    today = date.today()
    if start_date is None:
        start_date = today
    if end_date is None:
        end_date = start_date + timedelta(days=config.horizon_days)

    if start_date < today:
        start_date = today
    if end_date > today + timedelta(days=config.horizon_days):
        end_date = today + timedelta(days=config.horizon_days)
    if end_date < start_date:
        end_date = start_date

    business, service = _load(db, business_id, service_id)

    dates = calculate_dates_with_slots(
        db=db,
        business=business,
        service=service,
        start_date=start_date,
        end_date=end_date,
        now=datetime.now(),
        location_id=location_id,
        config=config,
        redis=redis,
    )

    return SlotsDatesResponse(
        business_id=business_id,
        service_id=service_id,
        start_date=start_date,
        end_date=end_date,
        dates_with_slots=dates,
        horizon_days=config.horizon_days,
    )
