from typing import List
from datetime import date

from pydantic import BaseModel, Field


class OccupiedRange(BaseModel):
    booking_id: int
    check_in: date
    check_out: date
    guest_name: str
    status: str


class RoomAvailability(BaseModel):
    id: int
    room_number: str
    type: str
    base_price: float
    is_available: bool
    bookings: List[OccupiedRange] = Field(default_factory=list)
