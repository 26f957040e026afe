from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database.connection import get_db
from models import Extra, Profile
from schemas.bookings import DeleteResult
from schemas.extras import ExtraCreate, ExtraRead, ExtraUpdate
from services.repositories import ExtraRepository
from utils.dependencies import get_current_profile
from utils.errors import PersistenceError
from utils.logging_utils import log_error, log_event


router = APIRouter(prefix="/extras", tags=["Extras"])


def _commit(db: Session, user: str, action: str, detail: str):
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log_error("extras", user, f"{action} failed", f"{detail} error={e}")
        raise PersistenceError("Could not save the extra")
    log_event("extras", user, action, detail)


@router.get("", response_model=List[ExtraRead])
def list_extras(
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    return ExtraRepository(db).find_active(order_by=Extra.name)


@router.post("", response_model=ExtraRead)
def create_extra(
    payload: ExtraCreate,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    extra = Extra(**payload.model_dump())
    db.add(extra)
    _commit(db, current.email, "Extra created", f"name={payload.name} package={payload.is_package}")
    db.refresh(extra)
    return extra


@router.put("/{extra_id}", response_model=ExtraRead)
def update_extra(
    payload: ExtraUpdate,
    extra_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    extra = ExtraRepository(db).get_or_404(extra_id)
    for field, value in payload.model_dump().items():
        setattr(extra, field, value)
    _commit(db, current.email, "Extra updated", f"id={extra_id}")
    db.refresh(extra)
    return extra


@router.delete("/{extra_id}", response_model=DeleteResult)
def delete_extra(
    extra_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    """Soft delete; bookings keep their copied label and price"""
    repo = ExtraRepository(db)
    repo.soft_delete(repo.get_or_404(extra_id))
    _commit(db, current.email, "Extra deleted", f"id={extra_id}")
    return DeleteResult(success=True)
