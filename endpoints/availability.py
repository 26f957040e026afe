"""
Availability calendar feed (public)
"""
from collections import defaultdict
from typing import Callable, List
from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, selectinload

from database.connection import get_db
from models import Booking, BookingRoom, BookingStatus, Room
from schemas.availability import OccupiedRange, RoomAvailability
from utils.dependencies import date_range_params, get_today_provider


router = APIRouter(prefix="/availability", tags=["Availability"])


@router.get("", response_model=List[RoomAvailability])
def get_availability(
    date_range=Depends(date_range_params),
    db: Session = Depends(get_db),
    today: Callable[[], date] = Depends(get_today_provider),
):
    """
    Every active room with the stays that occupy it.
    Without a range only stays ending today or later are listed.
    """
    start, end = date_range

    rooms = (
        db.query(Room)
        .options(selectinload(Room.room_type))
        .filter(Room.deleted_at.is_(None))
        .order_by(Room.room_number)
        .all()
    )

    query = (
        db.query(BookingRoom)
        .join(Booking, Booking.id == BookingRoom.booking_id)
        .options(selectinload(BookingRoom.booking).selectinload(Booking.guest))
        .filter(Booking.status != BookingStatus.CANCELLED)
    )
    if start is None and end is None:
        query = query.filter(BookingRoom.check_out_date >= today())
    else:
        if start is not None:
            query = query.filter(BookingRoom.check_out_date >= start)
        if end is not None:
            query = query.filter(BookingRoom.check_in_date <= end)

    occupied = defaultdict(list)
    for segment in query.order_by(BookingRoom.check_in_date).all():
        booking = segment.booking
        occupied[segment.room_id].append(OccupiedRange(
            booking_id=booking.id,
            check_in=segment.check_in_date,
            check_out=segment.check_out_date,
            guest_name=booking.guest.name if booking.guest else "Unknown guest",
            status=booking.status.value,
        ))

    return [
        RoomAvailability(
            id=room.id,
            room_number=room.room_number,
            type=room.room_type.name if room.room_type else "",
            base_price=float(room.room_type.base_price or 0) if room.room_type else 0.0,
            is_available=room.is_available,
            bookings=occupied.get(room.id, []),
        )
        for room in rooms
    ]
