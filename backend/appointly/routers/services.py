# backend/appointly/routers/services.py
# PATCH = ALLOWED, DELETE = soft-delete (is_active)
# Duration / buffers feed slot generation and (optionally) conflict checks.

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import (
    Business as DBBusiness,
    Locations as DBLocations,
    Services as DBServices,
)
from ..schemas.services import (
    ServiceCreate,
    ServiceUpdate,
    ServiceRead,
)

router = APIRouter(prefix="/services", tags=["services"])


def _check_location(db: Session, business_id: int, location_id: Optional[int]) -> None:
    if location_id is None:
        return
    location = db.get(DBLocations, location_id)
    if not location or location.business_id != business_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Location does not belong to this business",
        )


@router.get("/", response_model=list[ServiceRead])
def list_services(
    business_id: int,
    location_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    """Active services; with location_id, that location's plus business-wide ones."""
    query = db.query(DBServices).filter(
        DBServices.business_id == business_id,
        DBServices.is_active.is_(True),
    )
    if location_id is not None:
        query = query.filter(
            or_(DBServices.location_id == location_id, DBServices.location_id.is_(None))
        )
    return query.order_by(DBServices.name).all()


@router.get("/{id}", response_model=ServiceRead)
def get_service(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBServices, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.post("/", response_model=ServiceRead, status_code=status.HTTP_201_CREATED)
def create_service(data: ServiceCreate, db: Session = Depends(get_db)):
    if not db.get(DBBusiness, data.business_id):
        raise HTTPException(status_code=404, detail="Business not found")
    _check_location(db, data.business_id, data.location_id)

    obj = DBServices(**data.model_dump())
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@router.patch("/{id}", response_model=ServiceRead)
def update_service(id: int, data: ServiceUpdate, db: Session = Depends(get_db)):
    obj = db.get(DBServices, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")

    changes = data.model_dump(exclude_unset=True)
    if "location_id" in changes:
        _check_location(db, obj.business_id, changes["location_id"])

    for field, value in changes.items():
        setattr(obj, field, value)

    db.commit()
    db.refresh(obj)
    return obj


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_service(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBServices, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")

    # Existing bookings keep pointing at it
    obj.is_active = False
    db.commit()
