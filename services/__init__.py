"""
Business services for bookings and payments
"""

from .booking_service import (
    BookingBuilder,
    BookingService,
    Conflict,
    ConflictReport,
    ReservationValidator,
)
from .payment_service import PaymentService, booking_balance

__all__ = [
    "BookingBuilder",
    "BookingService",
    "Conflict",
    "ConflictReport",
    "ReservationValidator",
    "PaymentService",
    "booking_balance",
]
