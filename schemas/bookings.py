from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, PositiveInt, ConfigDict, field_validator, constr

from schemas.guests import GuestRead
from schemas.payments import PaymentRead
from schemas.rooms import RoomRead
from utils.date_ranges import parse_to_date


class BookingRoomIn(BaseModel):
    """
    One room segment of a booking request.
    Fields are optional here so that a missing value surfaces as a MissingField
    error naming the segment, not as a generic schema error.
    """
    room_id: Optional[int] = Field(None, alias="roomId", gt=0)
    check_in_date: Optional[date] = None
    check_out_date: Optional[date] = None
    price: Optional[Decimal] = Field(None, max_digits=12, decimal_places=2)
    discount: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("check_in_date", "check_out_date", mode="before")
    @classmethod
    def parse_dates(cls, value):
        if value is None or value == "":
            return None
        return parse_to_date(value)

    @field_validator("discount", mode="before")
    @classmethod
    def default_discount(cls, value):
        return Decimal("0") if value is None or value == "" else value


class BookingExtraIn(BaseModel):
    extra_id: Optional[int] = Field(None, alias="extraId", gt=0)
    label: Optional[constr(strip_whitespace=True, max_length=200)] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    quantity: PositiveInt = 1

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("quantity", mode="before")
    @classmethod
    def default_quantity(cls, value):
        return 1 if value is None else value


class BookingWrite(BaseModel):
    """Body of POST /bookings and PUT /bookings/{id}"""
    guest_id: int = Field(..., alias="guestId", gt=0)
    booking_rooms: List[BookingRoomIn]
    booking_extras: List[BookingExtraIn] = Field(default_factory=list)
    # Informative only: the server always recomputes the total
    total_price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    discount: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    note: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("booking_extras", mode="before")
    @classmethod
    def default_extras(cls, value):
        return [] if value is None else value

    @field_validator("discount", mode="before")
    @classmethod
    def default_discount(cls, value):
        return Decimal("0") if value is None or value == "" else value


class CheckInRequest(BaseModel):
    proof_image_url: Optional[str] = Field(None, alias="proofImageUrl")

    model_config = ConfigDict(populate_by_name=True)


# ========== READ ==========

class BookingRoomRead(BaseModel):
    id: int
    booking_id: int
    room_id: int
    check_in_date: date
    check_out_date: date
    nights: int
    price: float
    discount: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    room: Optional[RoomRead] = None

    model_config = ConfigDict(from_attributes=True)


class BookingExtraRead(BaseModel):
    id: int
    booking_id: int
    extra_id: Optional[int] = None
    label: str
    price: float
    quantity: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BookingRead(BaseModel):
    id: int
    guest_id: int
    total_price: float
    discount: float
    status: str
    proof_image_url: Optional[str] = None
    note: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    guest: Optional[GuestRead] = None
    booking_rooms: List[BookingRoomRead] = Field(default_factory=list)
    booking_extras: List[BookingExtraRead] = Field(default_factory=list)
    payments: List[PaymentRead] = Field(default_factory=list)
    # Derived from the ledger on every read
    total_paid: float = 0
    remaining: float = 0
    payment_status: str = "unpaid"


class DeleteResult(BaseModel):
    success: bool = True
