"""
Authentication and authorization dependencies
"""
from datetime import date
from typing import Callable, Optional, Tuple

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from database.connection import get_db
from models import Profile
from services.repositories import ProfileRepository
from utils.auth import verify_token
from utils.date_ranges import parse_optional_date
from utils.errors import AuthError, InvalidDateRange, PermissionDenied, ValidationError
from utils.logging_utils import log_event
from utils.timezone import get_hotel_today


bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_profile(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Profile:
    """
    Resolves the staff profile behind the bearer token

    Raises:
        AuthError: missing/invalid token, or no active profile for the email
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthError("Not authenticated")

    email = verify_token(credentials.credentials)
    profile = ProfileRepository(db).find_by_email(email)
    if profile is None:
        log_event("auth", email, "Token without active profile")
        raise AuthError("Could not validate credentials")
    return profile


async def require_admin(current: Profile = Depends(get_current_profile)) -> Profile:
    """Requires the admin role"""
    if not current.is_admin:
        log_event("auth", current.email, "Admin access denied", f"role={current.role.value}")
        raise PermissionDenied("Administrator privileges required")
    return current


# ========== COMMON PARAMETERS ==========

def get_today_provider() -> Callable[[], date]:
    """Source of the hotel-local date used by check-in gating"""
    return get_hotel_today


def date_range_params(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
) -> Tuple[Optional[date], Optional[date]]:
    """startDate/endDate as ISO dates or ISO timestamps"""
    try:
        start, end = parse_optional_date(start_date), parse_optional_date(end_date)
    except ValueError as exc:
        raise ValidationError(str(exc), details={"startDate": start_date, "endDate": end_date})
    if start and end and start > end:
        raise InvalidDateRange("startDate must not be after endDate")
    return start, end
