"""
Pricing Engine - booking totals and payment ledger reconciliation
SINGLE SOURCE OF TRUTH for total_price, total_paid and remaining balance
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Iterable


CENT = Decimal("0.01")


class PaymentStatus(str, Enum):
    PAID = "paid"
    PARTIAL = "partial"
    UNPAID = "unpaid"


@dataclass(frozen=True)
class PaymentSummary:
    total_paid: Decimal
    remaining: Decimal
    status: PaymentStatus


def _safe_decimal(value, fallback: Decimal = Decimal("0")) -> Decimal:
    """Converts to Decimal safely"""
    if value is None:
        return fallback
    try:
        if isinstance(value, Decimal):
            return value
        return Decimal(str(value))
    except (ValueError, TypeError, ArithmeticError):
        return fallback


def read_field(item: Any, name: str, default=None):
    """Reads a value from an ORM row, a pydantic model or a plain dict"""
    if isinstance(item, dict):
        return item.get(name, default)
    return getattr(item, name, default)


def quantize(value) -> Decimal:
    return _safe_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def rooms_total(rooms: Iterable[Any]) -> Decimal:
    """Σ price - Σ discount over the room segments"""
    total = Decimal("0")
    for room in rooms:
        total += _safe_decimal(read_field(room, "price")) - _safe_decimal(read_field(room, "discount"))
    return total


def extras_total(extras: Iterable[Any]) -> Decimal:
    """Σ unit price × quantity over the extras"""
    total = Decimal("0")
    for extra in extras:
        quantity = read_field(extra, "quantity") or 1
        total += _safe_decimal(read_field(extra, "price")) * int(quantity)
    return total


def build_total(rooms: Iterable[Any], extras: Iterable[Any]) -> Decimal:
    """
    Gross booking total: rooms net of their own discounts plus extras.

    The booking-level discount is deliberately left out; it is applied by
    summarize_payments so the stored total stays auditable.
    """
    return quantize(rooms_total(rooms) + extras_total(extras))


def summarize_payments(total_price, discount, payments: Iterable[Any]) -> PaymentSummary:
    """
    Reconciles a booking against its payment ledger.

    Soft-deleted rows (deleted_at set) are ignored. The remaining balance is
    clamped at zero so overpayments or late discounts never show as negative.
    """
    total_paid = Decimal("0")
    for payment in payments:
        if read_field(payment, "deleted_at") is not None:
            continue
        total_paid += _safe_decimal(read_field(payment, "amount"))
    total_paid = quantize(total_paid)

    remaining = quantize(_safe_decimal(total_price) - _safe_decimal(discount) - total_paid)
    if remaining < 0:
        remaining = Decimal("0.00")

    if remaining <= 0:
        payment_status = PaymentStatus.PAID
    elif total_paid > 0:
        payment_status = PaymentStatus.PARTIAL
    else:
        payment_status = PaymentStatus.UNPAID

    return PaymentSummary(total_paid=total_paid, remaining=remaining, status=payment_status)
