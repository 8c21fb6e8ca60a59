from .user import User
from .session import Session
from .property import Property
from .property_image import PropertyImage
from .booking import Booking, BookingStatus
from .review import Review

__all__ = [
    "User",
    "Session",
    "Property",
    "PropertyImage",
    "Booking",
    "BookingStatus",
    "Review",
]
