from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from config import RATE_LIMIT_ADMIN_CHECK
from database.connection import get_db
from models import Profile
from schemas.users import AdminCheckRequest, AdminCheckResponse, ProfileRead
from services.repositories import ProfileRepository
from utils.dependencies import get_current_profile
from utils.logging_utils import log_event
from utils.rate_limiter import limiter


router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/check-admin", response_model=AdminCheckResponse)
@limiter.limit(RATE_LIMIT_ADMIN_CHECK)
def check_admin(
    request: Request,
    payload: AdminCheckRequest,
    db: Session = Depends(get_db),
):
    """Public: tells the login screen whether an email belongs to an admin"""
    email = payload.email.lower()
    profile = ProfileRepository(db).find_by_email(email)
    is_admin = bool(profile and profile.is_admin)
    log_event("auth", email, "Admin check", f"is_admin={is_admin}")
    return AdminCheckResponse(isAdmin=is_admin, email=email)


@router.get("/me", response_model=ProfileRead)
def read_current_profile(current: Profile = Depends(get_current_profile)):
    return current
