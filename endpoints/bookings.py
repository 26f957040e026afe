from typing import Callable, List, Optional
from datetime import date

from fastapi import APIRouter, Body, Depends, Path, Query
from sqlalchemy.orm import Session

from database.connection import get_db
from models import Booking, Profile
from schemas.bookings import (
    BookingExtraRead, BookingRead, BookingRoomRead, BookingWrite, CheckInRequest, DeleteResult
)
from schemas.guests import GuestRead
from schemas.payments import PaymentRead
from services.booking_service import BookingService
from services.payment_service import booking_balance
from utils.dependencies import date_range_params, get_current_profile, get_today_provider


router = APIRouter(prefix="/bookings", tags=["Bookings"])


def serialize_booking(booking: Booking) -> BookingRead:
    """Booking with its nested rows and the balance derived from the ledger"""
    summary = booking_balance(booking)
    return BookingRead(
        id=booking.id,
        guest_id=booking.guest_id,
        total_price=float(booking.total_price or 0),
        discount=float(booking.discount or 0),
        status=booking.status.value,
        proof_image_url=booking.proof_image_url,
        note=booking.note,
        created_at=booking.created_at,
        updated_at=booking.updated_at,
        guest=GuestRead.model_validate(booking.guest) if booking.guest else None,
        booking_rooms=[BookingRoomRead.model_validate(room) for room in booking.booking_rooms],
        booking_extras=[BookingExtraRead.model_validate(extra) for extra in booking.booking_extras],
        payments=[PaymentRead.model_validate(payment) for payment in booking.active_payments],
        total_paid=float(summary.total_paid),
        remaining=float(summary.remaining),
        payment_status=summary.status.value,
    )


def _service(db: Session, current: Profile, today: Optional[Callable[[], date]] = None) -> BookingService:
    return BookingService(db, today=today, user=current.email)


@router.get("", response_model=List[BookingRead])
def list_bookings(
    room_id: Optional[int] = Query(None, alias="roomId", gt=0),
    date_range=Depends(date_range_params),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    start, end = date_range
    bookings = _service(db, current).list_bookings(room_id=room_id, start=start, end=end)
    return [serialize_booking(booking) for booking in bookings]


@router.get("/{booking_id}", response_model=BookingRead)
def get_booking(
    booking_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    return serialize_booking(_service(db, current).get_booking(booking_id))


@router.post("", response_model=BookingRead)
def create_booking(
    payload: BookingWrite,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    return serialize_booking(_service(db, current).create_booking(payload))


@router.put("/{booking_id}", response_model=BookingRead)
def update_booking(
    payload: BookingWrite,
    booking_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    return serialize_booking(_service(db, current).update_booking(booking_id, payload))


@router.delete("/{booking_id}", response_model=DeleteResult)
def delete_booking(
    booking_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    _service(db, current).delete_booking(booking_id)
    return DeleteResult(success=True)


@router.post("/{booking_id}/check-in", response_model=BookingRead)
def check_in(
    booking_id: int = Path(..., gt=0),
    payload: Optional[CheckInRequest] = Body(None),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
    today: Callable[[], date] = Depends(get_today_provider),
):
    proof = payload.proof_image_url if payload else None
    booking = _service(db, current, today=today).check_in(booking_id, proof)
    return serialize_booking(booking)


@router.post("/{booking_id}/check-out", response_model=BookingRead)
def check_out(
    booking_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    return serialize_booking(_service(db, current).check_out(booking_id))


@router.post("/{booking_id}/cancel", response_model=BookingRead)
def cancel_booking(
    booking_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    return serialize_booking(_service(db, current).cancel(booking_id))
