"""
Payment ledger service
Payments are append-only rows; the balance is always recomputed from the
non-deleted rows with summarize_payments.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import CURRENCY_SYMBOL
from models import Booking, Payment
from services.repositories import BookingRepository, PaymentRepository
from utils.errors import (
    NotFoundError, OverpaymentRejected, PersistenceError, ValidationError
)
from utils.logging_utils import log_error, log_event
from utils.pricing_engine import PaymentSummary, quantize, summarize_payments


PAYMENT_KINDS = ("full", "partial")
DEFAULT_METHOD = "cash"


def booking_balance(booking: Booking) -> PaymentSummary:
    return summarize_payments(booking.total_price, booking.discount, booking.payments)


class PaymentService:

    def __init__(self, db: Session, user: str = "system"):
        self.db = db
        self.user = user
        self.payments = PaymentRepository(db)
        self.bookings = BookingRepository(db)

    def list_payments(self, booking_id: Optional[int] = None) -> List[Payment]:
        criteria = []
        if booking_id is not None:
            self.bookings.get_or_404(booking_id)
            criteria.append(Payment.booking_id == booking_id)
        return self.payments.find_active(*criteria, order_by=Payment.created_at)

    def record_payment(self, booking_id: int, kind: str, amount=None,
                       method: Optional[str] = None) -> Payment:
        """
        Appends one ledger row.

        full    -> pays exactly the remaining balance (0.00 when nothing is owed)
        partial -> amount must be > 0 and must not exceed the remaining balance
        """
        if kind not in PAYMENT_KINDS:
            raise ValidationError("Payment type must be 'full' or 'partial'", details={"type": kind})

        # Row lock serializes concurrent payments against the same booking
        booking = self.bookings.lock(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found", details={"id": booking_id})

        remaining = booking_balance(booking).remaining
        if kind == "full":
            paid = remaining
        else:
            if amount is None or quantize(amount) <= 0:
                raise ValidationError("Partial payment amount must be greater than zero")
            paid = quantize(amount)
            if paid > remaining:
                raise OverpaymentRejected(paid, remaining, currency=CURRENCY_SYMBOL)

        payment = Payment(booking_id=booking.id, amount=paid, method=method or DEFAULT_METHOD)
        try:
            self.payments.add(payment)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            log_error("payments", self.user, "Record payment failed", f"booking={booking_id} {exc}")
            raise PersistenceError("Could not record the payment") from exc

        self.db.refresh(payment)
        log_event(
            "payments", self.user, "Payment recorded",
            f"booking={booking_id} type={kind} amount={paid} remaining={remaining - paid}",
        )
        return payment

    def correct_payment(self, payment_id: int, amount) -> Payment:
        """Corrects the amount of an existing ledger row; no balance ceiling is enforced here"""
        amount = quantize(amount) if amount is not None else Decimal("0")
        if amount <= 0:
            raise ValidationError("Payment amount must be greater than zero")

        payment = self.payments.get_or_404(payment_id)
        previous = payment.amount
        payment.amount = amount
        payment.updated_at = datetime.utcnow()
        self._commit("Correct payment", payment_id)
        self.db.refresh(payment)
        log_event("payments", self.user, "Payment corrected", f"id={payment_id} {previous} -> {amount}")
        return payment

    def delete_payment(self, payment_id: int) -> None:
        payment = self.payments.get_or_404(payment_id)
        self.payments.soft_delete(payment)
        self._commit("Delete payment", payment_id)
        log_event("payments", self.user, "Payment deleted", f"id={payment_id} booking={payment.booking_id}")

    def _commit(self, action: str, payment_id: int):
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            log_error("payments", self.user, f"{action} failed", f"id={payment_id} {exc}")
            raise PersistenceError("Could not save the payment") from exc
