"""
Booking models
Includes: lifecycle status, per-room date segments, denormalized extras, payment ledger
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import (
    Column, Integer, String, ForeignKey, Date, DateTime, Numeric, Text,
    Index, CheckConstraint, Enum as SQLEnum
)
from sqlalchemy.orm import relationship

from database.connection import Base


# ========================================================================
# ENUMS
# ========================================================================

class BookingStatus(str, Enum):
    """Lifecycle: pending -> checked_in -> checked_out, pending -> cancelled"""
    PENDING = "pending"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"


# ----------- BOOKING -----------
class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("idx_booking_guest", "guest_id"),
        Index("idx_booking_status", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    guest_id = Column(Integer, ForeignKey("guests.id"), nullable=False)

    # Gross total: rooms net of their own discount plus extras.
    # The booking-level discount is only applied when computing the balance.
    total_price = Column(Numeric(12, 2), nullable=False, default=0)
    discount = Column(Numeric(12, 2), nullable=False, default=0)

    status = Column(
        SQLEnum(BookingStatus, values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=BookingStatus.PENDING,
    )
    proof_image_url = Column(String(500), nullable=True)
    note = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    guest = relationship("Guest", back_populates="bookings")
    booking_rooms = relationship(
        "BookingRoom",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingRoom.check_in_date",
    )
    booking_extras = relationship(
        "BookingExtra",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingExtra.id",
    )
    payments = relationship(
        "Payment",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="Payment.created_at",
    )

    @property
    def active_payments(self):
        """Ledger rows that count towards the balance"""
        return [p for p in self.payments if p.deleted_at is None]

    def __repr__(self):
        return f"<Booking(id={self.id}, guest_id={self.guest_id}, status='{self.status}')>"


# ----------- BOOKING ROOM (one room, one date range) -----------
class BookingRoom(Base):
    __tablename__ = "booking_rooms"
    __table_args__ = (
        CheckConstraint("check_out_date > check_in_date", name="ck_booking_room_dates"),
        Index("idx_booking_room_booking", "booking_id"),
        Index("idx_booking_room_room_dates", "room_id", "check_in_date", "check_out_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False)

    # Half-open stay: occupies [check_in_date, check_out_date)
    check_in_date = Column(Date, nullable=False)
    check_out_date = Column(Date, nullable=False)

    price = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(12, 2), nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    booking = relationship("Booking", back_populates="booking_rooms")
    room = relationship("Room", back_populates="booking_rooms")

    @property
    def nights(self):
        return (self.check_out_date - self.check_in_date).days

    def __repr__(self):
        return (
            f"<BookingRoom(booking_id={self.booking_id}, room_id={self.room_id}, "
            f"{self.check_in_date}->{self.check_out_date})>"
        )


# ----------- BOOKING EXTRA -----------
class BookingExtra(Base):
    """
    Add-on charge attached to a booking.
    label/price are copied at booking time so later catalog edits
    never change historical bookings.
    """
    __tablename__ = "booking_extras"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_booking_extra_quantity"),
        Index("idx_booking_extra_booking", "booking_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False)
    extra_id = Column(Integer, ForeignKey("extras.id", ondelete="SET NULL"), nullable=True)

    label = Column(String(200), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    booking = relationship("Booking", back_populates="booking_extras")
    extra = relationship("Extra")

    def __repr__(self):
        return f"<BookingExtra(booking_id={self.booking_id}, label='{self.label}')>"
