from typing import Optional
from datetime import datetime

from pydantic import BaseModel, EmailStr, ConfigDict, constr, field_validator


class GuestBase(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=120)
    email: Optional[EmailStr] = None
    phone: Optional[constr(strip_whitespace=True, max_length=40)] = None

    @field_validator("email", "phone", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class GuestCreate(GuestBase):
    pass


class GuestUpdate(GuestBase):
    pass


class GuestRead(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
