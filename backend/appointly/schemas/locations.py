# backend/appointly/schemas/locations.py

from typing import Optional
from pydantic import BaseModel


class LocationCreate(BaseModel):
    business_id: int
    name: str
    address: Optional[str] = None

    model_config = {"from_attributes": True}


class LocationUpdate(BaseModel):
    is_active: Optional[bool] = None
    name: Optional[str] = None
    address: Optional[str] = None

    model_config = {"from_attributes": True}


class LocationRead(BaseModel):
    id: int
    business_id: int
    name: str
    address: Optional[str] = None
    is_active: bool

    model_config = {"from_attributes": True}
