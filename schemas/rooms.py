from typing import Optional
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, ConfigDict, constr, model_validator


# ========== ROOM TYPES ==========

class RoomTypeCreate(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=100)
    description: Optional[str] = None
    base_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)


class RoomTypeUpdate(BaseModel):
    name: Optional[constr(strip_whitespace=True, min_length=1, max_length=100)] = None
    description: Optional[str] = None
    base_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)

    @model_validator(mode="before")
    def validate_payload(cls, data):
        if isinstance(data, dict) and data:
            return data
        raise ValueError("At least one field is required for an update")


class RoomTypeRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    base_price: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ========== ROOMS ==========

class RoomCreate(BaseModel):
    room_number: constr(strip_whitespace=True, min_length=1, max_length=20)
    room_type_id: int = Field(..., gt=0)
    is_available: bool = True


class RoomUpdate(BaseModel):
    room_number: Optional[constr(strip_whitespace=True, min_length=1, max_length=20)] = None
    room_type_id: Optional[int] = Field(None, gt=0)
    is_available: Optional[bool] = None

    @model_validator(mode="before")
    def validate_payload(cls, data):
        if isinstance(data, dict) and data:
            return data
        raise ValueError("At least one field is required for an update")


class RoomRead(BaseModel):
    id: int
    room_number: str
    room_type_id: int
    is_available: bool
    type: Optional[RoomTypeRead] = Field(None, validation_alias="room_type")

    model_config = ConfigDict(from_attributes=True)
