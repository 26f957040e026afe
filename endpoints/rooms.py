from typing import List, Optional

from fastapi import APIRouter, Depends, Path
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from database.connection import get_db
from models import Profile, Room
from schemas.bookings import DeleteResult
from schemas.rooms import RoomCreate, RoomRead, RoomUpdate
from services.repositories import RoomRepository, RoomTypeRepository
from utils.dependencies import get_current_profile
from utils.errors import PersistenceError, ValidationError
from utils.logging_utils import log_error, log_event


router = APIRouter(prefix="/rooms", tags=["Rooms"])


def _check_number_free(db: Session, room_number: str, room_id: Optional[int] = None):
    # Unique across soft-deleted rows too (database constraint)
    existing = RoomRepository(db).find_by_number(room_number, include_deleted=True)
    if existing and existing.id != room_id:
        raise ValidationError(f"Room number {room_number} already exists")


def _commit(db: Session, user: str, action: str, detail: str):
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        log_error("rooms", user, f"{action} failed", f"{detail} error={e}")
        raise ValidationError("Room number already exists")
    except SQLAlchemyError as e:
        db.rollback()
        log_error("rooms", user, f"{action} failed", f"{detail} error={e}")
        raise PersistenceError("Could not save the room")
    log_event("rooms", user, action, detail)


@router.get("", response_model=List[RoomRead])
def list_rooms(
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    return (
        RoomRepository(db).query()
        .options(selectinload(Room.room_type))
        .order_by(Room.room_number)
        .all()
    )


@router.post("", response_model=RoomRead)
def create_room(
    payload: RoomCreate,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    RoomTypeRepository(db).get_or_404(payload.room_type_id)
    _check_number_free(db, payload.room_number)
    room = Room(**payload.model_dump())
    db.add(room)
    _commit(db, current.email, "Room created", f"number={payload.room_number}")
    db.refresh(room)
    return room


@router.put("/{room_id}", response_model=RoomRead)
def update_room(
    payload: RoomUpdate,
    room_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    room = RoomRepository(db).get_or_404(room_id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("room_type_id") is not None:
        RoomTypeRepository(db).get_or_404(changes["room_type_id"])
    if changes.get("room_number"):
        _check_number_free(db, changes["room_number"], room_id=room.id)
    for field, value in changes.items():
        if value is not None:
            setattr(room, field, value)
    _commit(db, current.email, "Room updated", f"id={room_id}")
    db.refresh(room)
    return room


@router.delete("/{room_id}", response_model=DeleteResult)
def delete_room(
    room_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    repo = RoomRepository(db)
    room = repo.soft_delete(repo.get_or_404(room_id))
    _commit(db, current.email, "Room deleted", f"id={room_id} number={room.room_number}")
    return DeleteResult(success=True)
