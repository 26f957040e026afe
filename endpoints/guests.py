from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database.connection import get_db
from models import Guest, Profile
from schemas.bookings import DeleteResult
from schemas.guests import GuestCreate, GuestRead, GuestUpdate
from services.repositories import GuestRepository
from utils.dependencies import get_current_profile
from utils.errors import PersistenceError
from utils.logging_utils import log_error, log_event


router = APIRouter(prefix="/guests", tags=["Guests"])


def _commit(db: Session, user: str, action: str, detail: str):
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log_error("guests", user, f"{action} failed", f"{detail} error={e}")
        raise PersistenceError("Could not save the guest")
    log_event("guests", user, action, detail)


@router.get("", response_model=List[GuestRead])
def list_guests(
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    return GuestRepository(db).find_active(order_by=Guest.name)


@router.get("/{guest_id}", response_model=GuestRead)
def get_guest(
    guest_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    return GuestRepository(db).get_or_404(guest_id)


@router.post("", response_model=GuestRead)
def create_guest(
    payload: GuestCreate,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    guest = Guest(**payload.model_dump())
    db.add(guest)
    _commit(db, current.email, "Guest created", f"name={payload.name}")
    db.refresh(guest)
    return guest


@router.put("/{guest_id}", response_model=GuestRead)
def update_guest(
    payload: GuestUpdate,
    guest_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    guest = GuestRepository(db).get_or_404(guest_id)
    for field, value in payload.model_dump().items():
        setattr(guest, field, value)
    _commit(db, current.email, "Guest updated", f"id={guest_id}")
    db.refresh(guest)
    return guest


@router.delete("/{guest_id}", response_model=DeleteResult)
def delete_guest(
    guest_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    repo = GuestRepository(db)
    repo.soft_delete(repo.get_or_404(guest_id))
    _commit(db, current.email, "Guest deleted", f"id={guest_id}")
    return DeleteResult(success=True)
