"""
Booking services
Contains the business logic for:
- Conflict detection per room and date range (ReservationValidator)
- Building the booking aggregate: rooms, extras, totals (BookingBuilder)
- Lifecycle: create, edit, delete, check-in, check-out, cancel (BookingService)
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from models import Booking, BookingExtra, BookingRoom, BookingStatus, Room
from services.repositories import (
    BookingRepository, ExtraRepository, GuestRepository, RoomRepository
)
from utils.date_ranges import overlaps
from utils.errors import (
    AlreadyCheckedIn, BookingConflict, HotelError, InvalidDateRange, InvalidPrice,
    MissingField, NotCheckInDate, NotFoundError, PersistenceError, StateError,
    ValidationError,
)
from utils.logging_utils import log_error, log_event
from utils.pricing_engine import build_total, quantize, read_field
from utils.timezone import get_hotel_today


REQUIRED_SEGMENT_FIELDS = ("room_id", "check_in_date", "check_out_date", "price")


# ========================================================================
# CONFLICT DETECTION
# ========================================================================

@dataclass(frozen=True)
class Conflict:
    booking_id: int
    room_id: int
    room_number: str
    guest_name: str
    check_in: date
    check_out: date
    same_guest: bool

    def message(self) -> str:
        if self.same_guest:
            return (
                f"Possible duplicate booking: {self.guest_name} already has room "
                f"{self.room_number} booked from {self.check_in} to {self.check_out}"
            )
        return (
            f"Room {self.room_number} is already booked by {self.guest_name} "
            f"from {self.check_in} to {self.check_out}"
        )

    def to_dict(self) -> dict:
        return {
            "room_number": self.room_number,
            "guest_name": self.guest_name,
            "check_in": self.check_in.isoformat(),
            "check_out": self.check_out.isoformat(),
            "booking_id": self.booking_id,
            "same_guest": self.same_guest,
        }


@dataclass
class ConflictReport:
    same_guest: List[Conflict] = field(default_factory=list)
    other_guest: List[Conflict] = field(default_factory=list)

    @property
    def conflicts(self) -> List[Conflict]:
        return self.other_guest + self.same_guest

    @property
    def has_conflicts(self) -> bool:
        return bool(self.same_guest or self.other_guest)

    def merge(self, other: "ConflictReport") -> "ConflictReport":
        self.same_guest.extend(other.same_guest)
        self.other_guest.extend(other.other_guest)
        return self

    def raise_for_conflicts(self):
        if not self.has_conflicts:
            return
        conflicts = self.conflicts
        raise BookingConflict(
            "; ".join(c.message() for c in conflicts),
            details=[c.to_dict() for c in conflicts],
        )


class ReservationValidator:
    """Checks requested room/date segments against the reservations already stored"""

    def __init__(self, db: Session):
        self.db = db

    def validate(
        self,
        room_id: int,
        check_in: date,
        check_out: date,
        guest_id: int,
        exclude_booking_id: Optional[int] = None,
    ) -> ConflictReport:
        if check_in >= check_out:
            raise InvalidDateRange(
                "Check-out date must be after check-in date",
                details={"room_id": room_id, "check_in": str(check_in), "check_out": str(check_out)},
            )

        # SQL narrows the candidates; overlaps() stays the single source of truth
        query = (
            self.db.query(BookingRoom)
            .join(Booking, Booking.id == BookingRoom.booking_id)
            .options(selectinload(BookingRoom.booking).selectinload(Booking.guest))
            .filter(
                BookingRoom.room_id == room_id,
                Booking.status != BookingStatus.CANCELLED,
                BookingRoom.check_in_date < check_out,
                BookingRoom.check_out_date > check_in,
            )
        )
        if exclude_booking_id is not None:
            query = query.filter(BookingRoom.booking_id != exclude_booking_id)

        report = ConflictReport()
        for existing in query.order_by(BookingRoom.check_in_date, BookingRoom.id).all():
            if not overlaps(existing.check_in_date, existing.check_out_date, check_in, check_out):
                continue
            booking = existing.booking
            same_guest = booking.guest_id == guest_id
            conflict = Conflict(
                booking_id=booking.id,
                room_id=room_id,
                room_number=self._room_number(room_id),
                guest_name=booking.guest.name if booking.guest else "Unknown guest",
                check_in=existing.check_in_date,
                check_out=existing.check_out_date,
                same_guest=same_guest,
            )
            if same_guest:
                report.same_guest.append(conflict)
            else:
                report.other_guest.append(conflict)
        return report

    def validate_segments(
        self,
        segments: Iterable,
        guest_id: int,
        exclude_booking_id: Optional[int] = None,
    ) -> ConflictReport:
        """
        Validates every segment independently and raises BookingConflict if any
        of them collides with a stored reservation or with another segment of
        the same request.
        """
        segments = list(segments)
        self._check_request_overlaps(segments)

        report = ConflictReport()
        for segment in segments:
            report.merge(self.validate(
                read_field(segment, "room_id"),
                read_field(segment, "check_in_date"),
                read_field(segment, "check_out_date"),
                guest_id,
                exclude_booking_id=exclude_booking_id,
            ))
        report.raise_for_conflicts()
        return report

    def _check_request_overlaps(self, segments: list):
        for index, first in enumerate(segments):
            for second in segments[index + 1:]:
                if read_field(first, "room_id") != read_field(second, "room_id"):
                    continue
                if overlaps(
                    read_field(first, "check_in_date"), read_field(first, "check_out_date"),
                    read_field(second, "check_in_date"), read_field(second, "check_out_date"),
                ):
                    room_number = self._room_number(read_field(first, "room_id"))
                    raise BookingConflict(
                        f"Room {room_number} is requested twice for overlapping dates",
                        details=[{
                            "room_number": room_number,
                            "first": [str(read_field(first, "check_in_date")), str(read_field(first, "check_out_date"))],
                            "second": [str(read_field(second, "check_in_date")), str(read_field(second, "check_out_date"))],
                        }],
                    )

    def _room_number(self, room_id: int) -> str:
        room = self.db.get(Room, room_id)
        return room.room_number if room else str(room_id)


# ========================================================================
# AGGREGATE BUILDER
# ========================================================================

class BookingBuilder:
    """Normalizes request segments/extras and writes the booking aggregate (no commit)"""

    def __init__(self, db: Session):
        self.db = db

    def check_segments(self, segments: Iterable) -> List[dict]:
        checked = []
        for index, segment in enumerate(segments):
            missing = [name for name in REQUIRED_SEGMENT_FIELDS if read_field(segment, name) is None]
            if missing:
                raise MissingField(
                    "Missing required fields",
                    details={"segment": index, "fields": missing},
                )

            check_in = read_field(segment, "check_in_date")
            check_out = read_field(segment, "check_out_date")
            if check_out <= check_in:
                raise InvalidDateRange(
                    "Check-out date must be after check-in date",
                    details={"segment": index, "check_in": str(check_in), "check_out": str(check_out)},
                )

            price = quantize(read_field(segment, "price"))
            discount = quantize(read_field(segment, "discount") or 0)
            if discount < 0:
                raise InvalidPrice("Discount cannot be negative", details={"segment": index})
            if price - discount <= 0:
                raise InvalidPrice(
                    "Room price after discount must be greater than zero",
                    details={"segment": index, "price": float(price), "discount": float(discount)},
                )

            checked.append({
                "room_id": read_field(segment, "room_id"),
                "check_in_date": check_in,
                "check_out_date": check_out,
                "price": price,
                "discount": discount,
            })
        return checked

    def resolve_extras(self, extras: Iterable) -> List[dict]:
        """
        Catalog-backed extras inherit label and price from the catalog when the
        request leaves them out. The values are copied onto the booking.
        """
        catalog = ExtraRepository(self.db)
        resolved = []
        for index, extra in enumerate(extras or []):
            extra_id = read_field(extra, "extra_id")
            label = read_field(extra, "label")
            price = read_field(extra, "price")
            quantity = read_field(extra, "quantity")
            quantity = 1 if quantity is None else quantity

            if extra_id is not None:
                source = catalog.get_or_404(extra_id)
                label = label or source.name
                price = source.price if price is None else price

            if not label or price is None:
                raise MissingField(
                    "Extras need a label and a price",
                    details={"extra": index},
                )
            price = quantize(price)
            if price < 0:
                raise InvalidPrice("Extra price cannot be negative", details={"extra": index})
            if int(quantity) < 1:
                raise ValidationError("Extra quantity must be at least 1", details={"extra": index})

            resolved.append({
                "extra_id": extra_id,
                "label": label,
                "price": price,
                "quantity": int(quantity),
            })
        return resolved

    def create(self, guest_id: int, segments: List[dict], extras: List[dict],
               discount=Decimal("0"), note: Optional[str] = None) -> Booking:
        booking = Booking(
            guest_id=guest_id,
            total_price=build_total(segments, extras),
            discount=quantize(discount),
            status=BookingStatus.PENDING,
            note=note,
        )
        self._attach(booking, segments, extras)
        self.db.add(booking)
        self.db.flush()
        return booking

    def replace(self, booking: Booking, guest_id: int, segments: List[dict], extras: List[dict],
                discount=Decimal("0"), note: Optional[str] = None) -> Booking:
        # delete-orphan removes the previous rows on flush
        booking.booking_rooms.clear()
        booking.booking_extras.clear()
        self.db.flush()

        booking.guest_id = guest_id
        booking.total_price = build_total(segments, extras)
        booking.discount = quantize(discount)
        booking.note = note
        self._attach(booking, segments, extras)
        self.db.flush()
        return booking

    @staticmethod
    def _attach(booking: Booking, segments: List[dict], extras: List[dict]):
        for segment in segments:
            booking.booking_rooms.append(BookingRoom(**segment))
        for extra in extras:
            booking.booking_extras.append(BookingExtra(**extra))


# ========================================================================
# LIFECYCLE
# ========================================================================

class BookingService:
    """
    Booking lifecycle. Each public write validates everything first, writes,
    and commits exactly once; any failure leaves the database untouched.

    today: callable returning the hotel-local date, injectable for tests.
    """

    def __init__(self, db: Session, today: Optional[Callable[[], date]] = None, user: str = "system"):
        self.db = db
        self.today = today or get_hotel_today
        self.user = user
        self.bookings = BookingRepository(db)
        self.validator = ReservationValidator(db)
        self.builder = BookingBuilder(db)

    # ---------- reads ----------

    def _base_query(self):
        return self.db.query(Booking).options(
            selectinload(Booking.guest),
            selectinload(Booking.booking_rooms).selectinload(BookingRoom.room).selectinload(Room.room_type),
            selectinload(Booking.booking_extras),
            selectinload(Booking.payments),
        )

    def get_booking(self, booking_id: int) -> Booking:
        booking = self._base_query().filter(Booking.id == booking_id).first()
        if booking is None:
            raise NotFoundError("Booking not found", details={"id": booking_id})
        return booking

    def list_bookings(self, room_id: Optional[int] = None,
                      start: Optional[date] = None, end: Optional[date] = None) -> List[Booking]:
        """Bookings with at least one room segment matching every given filter"""
        if start and end and start > end:
            raise InvalidDateRange("startDate must not be after endDate")

        query = self._base_query()
        if room_id is not None or start is not None or end is not None:
            matching = self.db.query(BookingRoom.booking_id)
            if room_id is not None:
                matching = matching.filter(BookingRoom.room_id == room_id)
            if start is not None:
                matching = matching.filter(BookingRoom.check_out_date >= start)
            if end is not None:
                matching = matching.filter(BookingRoom.check_in_date <= end)
            query = query.filter(Booking.id.in_(matching))
        return query.order_by(Booking.created_at.asc(), Booking.id.asc()).all()

    # ---------- writes ----------

    def create_booking(self, payload) -> Booking:
        guest = GuestRepository(self.db).get_or_404(payload.guest_id)
        if not payload.booking_rooms:
            raise MissingField("At least one room is required", details={"fields": ["booking_rooms"]})

        segments = self.builder.check_segments(payload.booking_rooms)
        extras = self.builder.resolve_extras(payload.booking_extras)

        try:
            self._lock_and_validate(segments, guest.id)
            booking = self.builder.create(
                guest.id, segments, extras,
                discount=payload.discount or 0, note=payload.note,
            )
            self.db.commit()
        except HotelError:
            self.db.rollback()
            raise
        except SQLAlchemyError as exc:
            self.db.rollback()
            log_error("bookings", self.user, "Create booking failed", str(exc))
            raise PersistenceError("Could not save the booking") from exc

        self._note_client_total(payload, booking)
        log_event(
            "bookings", self.user, "Booking created",
            f"id={booking.id} guest={guest.id} rooms={len(segments)} total={booking.total_price}",
        )
        return self.get_booking(booking.id)

    def update_booking(self, booking_id: int, payload) -> Booking:
        booking = self.bookings.lock(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found", details={"id": booking_id})
        guest = GuestRepository(self.db).get_or_404(payload.guest_id)

        segments = self.builder.check_segments(payload.booking_rooms or [])
        extras = self.builder.resolve_extras(payload.booking_extras)

        try:
            self._lock_and_validate(segments, guest.id, exclude_booking_id=booking.id)
            self.builder.replace(
                booking, guest.id, segments, extras,
                discount=payload.discount or 0, note=payload.note,
            )
            self.db.commit()
        except HotelError:
            self.db.rollback()
            raise
        except SQLAlchemyError as exc:
            self.db.rollback()
            log_error("bookings", self.user, "Update booking failed", f"id={booking_id} {exc}")
            raise PersistenceError("Could not update the booking") from exc

        self._note_client_total(payload, booking)
        log_event(
            "bookings", self.user, "Booking updated",
            f"id={booking_id} rooms={len(segments)} total={booking.total_price}",
        )
        return self.get_booking(booking_id)

    def delete_booking(self, booking_id: int) -> None:
        """Hard delete; rooms, extras and payments go with it"""
        booking = self.bookings.get_or_404(booking_id)
        try:
            self.db.delete(booking)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            log_error("bookings", self.user, "Delete booking failed", f"id={booking_id} {exc}")
            raise PersistenceError("Could not delete the booking") from exc
        log_event("bookings", self.user, "Booking deleted", f"id={booking_id}")

    def check_in(self, booking_id: int, proof_image_url: Optional[str]) -> Booking:
        if not proof_image_url or not proof_image_url.strip():
            raise ValidationError("Proof image is required for check-in")

        booking = self._lock_or_404(booking_id)
        if booking.status == BookingStatus.CHECKED_IN:
            raise AlreadyCheckedIn("Booking is already checked in")
        if booking.status in (BookingStatus.CHECKED_OUT, BookingStatus.CANCELLED):
            raise StateError(f"Cannot check in a booking that is {booking.status.value}")

        today = self.today()
        check_in_dates = sorted({room.check_in_date for room in booking.booking_rooms})
        if today not in check_in_dates:
            raise NotCheckInDate(
                "Check-in is only allowed on the check-in date",
                details={
                    "checkInDate": check_in_dates[0].isoformat() if check_in_dates else None,
                    "today": today.isoformat(),
                },
            )

        booking.status = BookingStatus.CHECKED_IN
        booking.proof_image_url = proof_image_url.strip()
        self._commit_transition(booking, "Checked in")
        return self.get_booking(booking_id)

    def check_out(self, booking_id: int) -> Booking:
        booking = self._lock_or_404(booking_id)
        if booking.status != BookingStatus.CHECKED_IN:
            raise StateError(
                f"Only checked-in bookings can be checked out (status: {booking.status.value})"
            )
        booking.status = BookingStatus.CHECKED_OUT
        self._commit_transition(booking, "Checked out")
        return self.get_booking(booking_id)

    def cancel(self, booking_id: int) -> Booking:
        booking = self._lock_or_404(booking_id)
        if booking.status != BookingStatus.PENDING:
            raise StateError(
                f"Only pending bookings can be cancelled (status: {booking.status.value})"
            )
        booking.status = BookingStatus.CANCELLED
        self._commit_transition(booking, "Cancelled")
        return self.get_booking(booking_id)

    # ---------- helpers ----------

    def _lock_or_404(self, booking_id: int) -> Booking:
        booking = self.bookings.lock(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found", details={"id": booking_id})
        return booking

    def _lock_and_validate(self, segments: List[dict], guest_id: int,
                           exclude_booking_id: Optional[int] = None):
        room_ids = {segment["room_id"] for segment in segments}
        locked = RoomRepository(self.db).lock_rooms(room_ids)
        found = {room.id for room in locked if room.deleted_at is None}
        missing = sorted(room_ids - found)
        if missing:
            raise NotFoundError("Room not found", details={"id": missing[0]})

        self.validator.validate_segments(segments, guest_id, exclude_booking_id=exclude_booking_id)

    def _commit_transition(self, booking: Booking, action: str):
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            log_error("bookings", self.user, f"{action} failed", f"id={booking.id} {exc}")
            raise PersistenceError("Could not update the booking status") from exc
        log_event("bookings", self.user, action, f"id={booking.id}")

    def _note_client_total(self, payload, booking: Booking):
        sent = getattr(payload, "total_price", None)
        if sent is not None and quantize(sent) != quantize(booking.total_price):
            log_event(
                "bookings", self.user, "Client total ignored",
                f"id={booking.id} sent={quantize(sent)} computed={booking.total_price}",
            )
