from datetime import date, datetime

import pytz

from config import HOTEL_TIMEZONE

# Centralized timezone configuration
HOTEL_TZ = pytz.timezone(HOTEL_TIMEZONE)


def get_hotel_now() -> datetime:
    """Returns current time in Hotel Timezone"""
    return datetime.now(HOTEL_TZ)


def get_hotel_today() -> date:
    """Returns today's calendar date (midnight-truncated) in Hotel Timezone"""
    return get_hotel_now().date()


def to_hotel_time(dt: datetime) -> datetime:
    """Converts a datetime to Hotel Timezone"""
    if dt.tzinfo is None:
        # Naive datetimes are stored as UTC
        return pytz.utc.localize(dt).astimezone(HOTEL_TZ)
    return dt.astimezone(HOTEL_TZ)
