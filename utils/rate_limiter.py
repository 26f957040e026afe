"""
Rate Limiting Middleware
Protection against brute force and API abuse
"""
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from config import RATE_LIMIT_DEFAULT, RATE_LIMIT_STORAGE_URI

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[RATE_LIMIT_DEFAULT],
    storage_uri=RATE_LIMIT_STORAGE_URI,  # Redis in production
    strategy="fixed-window"
)


def setup_rate_limiting(app):
    """Attach the limiter to the FastAPI application"""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    return limiter
