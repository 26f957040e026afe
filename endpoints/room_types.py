from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database.connection import get_db
from models import Profile, Room, RoomType
from schemas.bookings import DeleteResult
from schemas.rooms import RoomTypeCreate, RoomTypeRead, RoomTypeUpdate
from services.repositories import RoomRepository, RoomTypeRepository
from utils.dependencies import get_current_profile
from utils.errors import PersistenceError, ValidationError
from utils.logging_utils import log_error, log_event


router = APIRouter(prefix="/room-types", tags=["Room types"])


def _commit(db: Session, user: str, action: str, detail: str):
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log_error("room_types", user, f"{action} failed", f"{detail} error={e}")
        raise PersistenceError("Could not save the room type")
    log_event("room_types", user, action, detail)


@router.get("", response_model=List[RoomTypeRead])
def list_room_types(
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    return RoomTypeRepository(db).find_active(order_by=RoomType.name)


@router.post("", response_model=RoomTypeRead)
def create_room_type(
    payload: RoomTypeCreate,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    room_type = RoomType(**payload.model_dump())
    db.add(room_type)
    _commit(db, current.email, "Room type created", f"name={payload.name}")
    db.refresh(room_type)
    return room_type


@router.put("/{room_type_id}", response_model=RoomTypeRead)
def update_room_type(
    payload: RoomTypeUpdate,
    room_type_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    room_type = RoomTypeRepository(db).get_or_404(room_type_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field != "description":
            continue
        setattr(room_type, field, value)
    _commit(db, current.email, "Room type updated", f"id={room_type_id}")
    db.refresh(room_type)
    return room_type


@router.delete("/{room_type_id}", response_model=DeleteResult)
def delete_room_type(
    room_type_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    repo = RoomTypeRepository(db)
    room_type = repo.get_or_404(room_type_id)
    if RoomRepository(db).find_active(Room.room_type_id == room_type_id):
        log_event("room_types", current.email, "Delete refused, type in use", f"id={room_type_id}")
        raise ValidationError("Room type is still used by active rooms")
    repo.soft_delete(room_type)
    _commit(db, current.email, "Room type deleted", f"id={room_type_id}")
    return DeleteResult(success=True)
