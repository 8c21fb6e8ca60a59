from .auth_routes import bp as auth_bp
from .user_routes import bp as users_bp
from .listing_routes import bp as listings_bp
from .booking_routes import bp as bookings_bp

__all__ = [
    "auth_bp",
    "users_bp",
    "listings_bp",
    "bookings_bp",
]
