# backend/appointly/schemas/services.py

from typing import Optional
from pydantic import BaseModel, Field


class ServiceCreate(BaseModel):
    business_id: int
    location_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    duration: int = Field(gt=0, description="Minutes")
    buffer_time_before: int = Field(0, ge=0)
    buffer_time_after: int = Field(0, ge=0)
    price: float = 0

    model_config = {"from_attributes": True}


class ServiceUpdate(BaseModel):
    is_active: Optional[bool] = None
    location_id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[int] = Field(None, gt=0)
    buffer_time_before: Optional[int] = Field(None, ge=0)
    buffer_time_after: Optional[int] = Field(None, ge=0)
    price: Optional[float] = None

    model_config = {"from_attributes": True}


class ServiceRead(BaseModel):
    id: int
    business_id: int
    location_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    duration: int
    buffer_time_before: int
    buffer_time_after: int
    price: float
    is_active: bool

    model_config = {"from_attributes": True}
