from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from database.connection import get_db
from models import Profile
from schemas.bookings import DeleteResult
from schemas.payments import PaymentCreate, PaymentRead, PaymentRecorded, PaymentUpdate
from services.payment_service import PaymentService
from utils.dependencies import get_current_profile


router = APIRouter(prefix="/payments", tags=["Payments"])


@router.get("", response_model=List[PaymentRead])
def list_payments(
    booking_id: Optional[int] = Query(None, alias="bookingId", gt=0),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    return PaymentService(db, user=current.email).list_payments(booking_id)


@router.post("", response_model=PaymentRecorded)
def record_payment(
    payload: PaymentCreate,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    """
    type=full pays the remaining balance; type=partial requires an amount
    that does not exceed it.
    """
    payment = PaymentService(db, user=current.email).record_payment(
        payload.booking_id, payload.type, amount=payload.amount, method=payload.method
    )
    return PaymentRecorded(
        success=True,
        paid=float(payment.amount),
        payment=PaymentRead.model_validate(payment),
    )


@router.put("/{payment_id}", response_model=PaymentRead)
def correct_payment(
    payload: PaymentUpdate,
    payment_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    return PaymentService(db, user=current.email).correct_payment(payment_id, payload.amount)


@router.delete("/{payment_id}", response_model=DeleteResult)
def delete_payment(
    payment_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    PaymentService(db, user=current.email).delete_payment(payment_id)
    return DeleteResult(success=True)
