"""
Models package init.
Exposes every model so that Base.metadata sees them when 'models' is imported.
"""

# 1. Staff
from .profile import Profile, ProfileRole

# 2. Room catalog
from .room import RoomType, Room

# 3. Guests and extras catalog
from .guest import Guest
from .extra import Extra

# 4. Bookings and ledger
from .booking import Booking, BookingRoom, BookingExtra, BookingStatus
from .payment import Payment

__all__ = [
    "Profile", "ProfileRole",
    "RoomType", "Room",
    "Guest", "Extra",
    "Booking", "BookingRoom", "BookingExtra", "BookingStatus",
    "Payment",
]
