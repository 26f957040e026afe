"""
Staff profiles (admin only)
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Path
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from database.connection import get_db
from models import Profile, ProfileRole
from schemas.bookings import DeleteResult
from schemas.users import ProfileRead, ProfileWrite
from services.repositories import ProfileRepository
from utils.dependencies import require_admin
from utils.errors import PersistenceError, ValidationError
from utils.logging_utils import log_error, log_event


router = APIRouter(prefix="/users", tags=["Users"])


def _check_email_free(db: Session, email: str, profile_id: Optional[int] = None):
    existing = ProfileRepository(db).find_by_email(email, include_deleted=True)
    if existing and existing.id != profile_id:
        raise ValidationError(f"A user with email {email} already exists")


def _commit(db: Session, user: str, action: str, detail: str):
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        log_error("users", user, f"{action} failed", f"{detail} error={e}")
        raise ValidationError("A user with that email already exists")
    except SQLAlchemyError as e:
        db.rollback()
        log_error("users", user, f"{action} failed", f"{detail} error={e}")
        raise PersistenceError("Could not save the user")
    log_event("users", user, action, detail)


@router.get("", response_model=List[ProfileRead])
def list_users(
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return ProfileRepository(db).find_active(order_by=Profile.name)


@router.post("", response_model=ProfileRead)
def create_user(
    payload: ProfileWrite,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    email = payload.email.lower()
    _check_email_free(db, email)
    profile = Profile(name=payload.name, email=email, role=ProfileRole(payload.role))
    db.add(profile)
    _commit(db, admin.email, "User created", f"email={email} role={payload.role}")
    db.refresh(profile)
    return profile


@router.put("/{profile_id}", response_model=ProfileRead)
def update_user(
    payload: ProfileWrite,
    profile_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    profile = ProfileRepository(db).get_or_404(profile_id)
    email = payload.email.lower()
    _check_email_free(db, email, profile_id=profile.id)
    if profile.id == admin.id and payload.role != ProfileRole.ADMIN.value:
        raise ValidationError("You cannot remove your own admin role")
    profile.name = payload.name
    profile.email = email
    profile.role = ProfileRole(payload.role)
    _commit(db, admin.email, "User updated", f"id={profile_id} role={payload.role}")
    db.refresh(profile)
    return profile


@router.delete("/{profile_id}", response_model=DeleteResult)
def delete_user(
    profile_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    repo = ProfileRepository(db)
    profile = repo.get_or_404(profile_id)
    if profile.id == admin.id:
        raise ValidationError("You cannot delete your own user")
    repo.soft_delete(profile)
    _commit(db, admin.email, "User deleted", f"id={profile_id}")
    return DeleteResult(success=True)
