from typing import Optional
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, ConfigDict, constr, model_validator


class ExtraBase(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=120)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    is_package: bool = False
    included_nights: Optional[int] = None

    @model_validator(mode="after")
    def validate_package(self):
        if self.is_package:
            if not self.included_nights or self.included_nights < 1:
                raise ValueError("Package must have at least 1 included night")
        else:
            self.included_nights = None
        return self


class ExtraCreate(ExtraBase):
    pass


class ExtraUpdate(ExtraBase):
    pass


class ExtraRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    is_package: bool
    included_nights: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
