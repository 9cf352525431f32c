# backend/appointly/routers/locations.py
# DELETE = soft-delete; inactive locations reject new bookings

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import Business as DBBusiness, Locations as DBLocations
from ..schemas.locations import LocationCreate, LocationRead, LocationUpdate

router = APIRouter(prefix="/locations", tags=["locations"])


def _get_location(db: Session, location_id: int) -> DBLocations:
    obj = db.get(DBLocations, location_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Location not found")
    return obj


@router.get("/", response_model=list[LocationRead])
def list_locations(
    business_id: int,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
):
    query = db.query(DBLocations).filter(DBLocations.business_id == business_id)
    if not include_inactive:
        query = query.filter(DBLocations.is_active.is_(True))
    return query.order_by(DBLocations.name).all()


@router.get("/{id}", response_model=LocationRead)
def get_location(id: int, db: Session = Depends(get_db)):
    return _get_location(db, id)


@router.post("/", response_model=LocationRead, status_code=status.HTTP_201_CREATED)
def create_location(data: LocationCreate, db: Session = Depends(get_db)):
    if not db.get(DBBusiness, data.business_id):
        raise HTTPException(status_code=404, detail="Business not found")

    location = DBLocations(**data.model_dump())
    db.add(location)
    db.commit()
    db.refresh(location)
    return location


@router.patch("/{id}", response_model=LocationRead)
def update_location(id: int, data: LocationUpdate, db: Session = Depends(get_db)):
    location = _get_location(db, id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(location, field, value)

    db.commit()
    db.refresh(location)
    return location


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_location(id: int, db: Session = Depends(get_db)):
    location = _get_location(db, id)
    location.is_active = False
    db.commit()
