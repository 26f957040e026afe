"""
Repositories with an explicit soft-delete contract.

Reads never rewrite queries behind the caller's back: every call site picks
find_active / find_all, or passes include_deleted to get().
"""

from datetime import datetime
from typing import Generic, List, Optional, Type, TypeVar

from sqlalchemy import func
from sqlalchemy.orm import Session

from models import Booking, Extra, Guest, Payment, Profile, Room, RoomType
from utils.errors import NotFoundError

T = TypeVar("T")


class Repository(Generic[T]):
    model: Type[T]
    label: str = "Record"

    def __init__(self, db: Session):
        self.db = db

    @property
    def soft_deletable(self) -> bool:
        return hasattr(self.model, "deleted_at")

    def query(self, include_deleted: bool = False):
        query = self.db.query(self.model)
        if self.soft_deletable and not include_deleted:
            query = query.filter(self.model.deleted_at.is_(None))
        return query

    def find_active(self, *criteria, order_by=None) -> List[T]:
        query = self.query().filter(*criteria)
        if order_by is not None:
            query = query.order_by(order_by)
        return query.all()

    def find_all(self, *criteria, order_by=None) -> List[T]:
        query = self.query(include_deleted=True).filter(*criteria)
        if order_by is not None:
            query = query.order_by(order_by)
        return query.all()

    def get(self, record_id: int, include_deleted: bool = False) -> Optional[T]:
        return self.query(include_deleted).filter(self.model.id == record_id).first()

    def get_or_404(self, record_id: int, include_deleted: bool = False) -> T:
        record = self.get(record_id, include_deleted=include_deleted)
        if record is None:
            raise NotFoundError(f"{self.label} not found", details={"id": record_id})
        return record

    def add(self, record: T) -> T:
        self.db.add(record)
        self.db.flush()
        return record

    def soft_delete(self, record: T) -> T:
        if not self.soft_deletable:
            raise TypeError(f"{self.model.__name__} is not soft-deletable")
        record.deleted_at = datetime.utcnow()
        return record


class RoomTypeRepository(Repository[RoomType]):
    model = RoomType
    label = "Room type"


class RoomRepository(Repository[Room]):
    model = Room
    label = "Room"

    def find_by_number(self, room_number: str, include_deleted: bool = True) -> Optional[Room]:
        return self.query(include_deleted).filter(Room.room_number == room_number).first()

    def lock_rooms(self, room_ids) -> List[Room]:
        """
        SELECT ... FOR UPDATE on the given rooms, in id order.
        Concurrent writers touching the same room wait here until the
        holder commits or rolls back.
        """
        ids = sorted(set(room_ids))
        if not ids:
            return []
        return (
            self.db.query(Room)
            .filter(Room.id.in_(ids))
            .order_by(Room.id)
            .with_for_update()
            .all()
        )


class GuestRepository(Repository[Guest]):
    model = Guest
    label = "Guest"


class ExtraRepository(Repository[Extra]):
    model = Extra
    label = "Extra"


class PaymentRepository(Repository[Payment]):
    model = Payment
    label = "Payment"


class ProfileRepository(Repository[Profile]):
    model = Profile
    label = "User"

    def find_by_email(self, email: str, include_deleted: bool = False) -> Optional[Profile]:
        return self.query(include_deleted).filter(func.lower(Profile.email) == email.strip().lower()).first()


class BookingRepository(Repository[Booking]):
    """Bookings are hard-deleted; there is no deleted_at column."""
    model = Booking
    label = "Booking"

    def lock(self, booking_id: int) -> Optional[Booking]:
        return (
            self.db.query(Booking)
            .filter(Booking.id == booking_id)
            .with_for_update()
            .first()
        )
