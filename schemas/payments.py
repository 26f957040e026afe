from typing import Optional, Literal
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, ConfigDict, constr


class PaymentCreate(BaseModel):
    booking_id: int = Field(..., alias="bookingId", gt=0)
    type: Literal["full", "partial"]
    amount: Optional[Decimal] = Field(None, max_digits=12, decimal_places=2)
    method: Optional[constr(strip_whitespace=True, min_length=1, max_length=40)] = None

    model_config = ConfigDict(populate_by_name=True)


class PaymentUpdate(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, description="Corrected amount (> 0)")


class PaymentRead(BaseModel):
    id: int
    booking_id: int
    amount: float
    method: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PaymentRecorded(BaseModel):
    success: bool = True
    paid: float
    payment: PaymentRead
