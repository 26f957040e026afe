from typing import Literal, Optional
from datetime import datetime

from pydantic import BaseModel, EmailStr, ConfigDict, constr

from models.profile import ProfileRole


class ProfileWrite(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=120)
    email: EmailStr
    role: Literal["admin", "assistant"]


class ProfileRead(BaseModel):
    id: int
    name: str
    email: str
    role: ProfileRole
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AdminCheckRequest(BaseModel):
    email: constr(strip_whitespace=True, min_length=1)


class AdminCheckResponse(BaseModel):
    isAdmin: bool
    email: str
