"""
Domain errors and their HTTP mapping.
Every error answers with the envelope {"error": message, "details": ...}.
"""
from typing import Any, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from utils.logging_utils import log_error


class HotelError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


# ========== VALIDATION (400) ==========

class ValidationError(HotelError):
    """Missing or malformed input"""


class MissingField(ValidationError):
    pass


class InvalidDateRange(ValidationError):
    pass


class InvalidPrice(ValidationError):
    pass


class BookingConflict(HotelError):
    """
    One or more requested room/date segments overlap existing reservations.
    details: list of {room_number, guest_name, check_in, check_out, booking_id, same_guest}
    """


class OverpaymentRejected(HotelError):
    def __init__(self, attempted, remaining, currency: str = ""):
        super().__init__(
            f"Payment amount ({currency}{attempted}) exceeds remaining balance ({currency}{remaining})",
            details={"attempted": float(attempted), "remaining": float(remaining)},
        )
        self.attempted = attempted
        self.remaining = remaining


# ========== LIFECYCLE (400) ==========

class StateError(HotelError):
    """Invalid lifecycle transition"""


class AlreadyCheckedIn(StateError):
    pass


class NotCheckInDate(StateError):
    pass


# ========== LOOKUP / AUTH ==========

class NotFoundError(HotelError):
    status_code = status.HTTP_404_NOT_FOUND


class AuthError(HotelError):
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDenied(HotelError):
    status_code = status.HTTP_403_FORBIDDEN


# ========== INFRASTRUCTURE (500) ==========

class PersistenceError(HotelError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def _hotel_error_handler(request: Request, exc: HotelError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"), "message": err.get("msg")}
        for err in exc.errors()
    ]
    log_error("http", "-", "Invalid request", f"path={request.url.path} errors={len(details)}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"error": "Validation failed", "details": details}),
    )


def setup_error_handlers(app):
    """Register the domain error handlers on the FastAPI application"""
    app.add_exception_handler(HotelError, _hotel_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
