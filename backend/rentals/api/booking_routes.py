from flask import Blueprint, request

from rentals.models.booking import BookingStatus
from rentals.schemas.booking_schemas import BookingCreateSchema, BookingUpdateSchema, ReviewCreateSchema
from rentals.services import booking_service
from rentals.utils.auth import current_user, login_required, require_self
from rentals.utils.responses import success_response

bp = Blueprint("bookings", __name__)

booking_create_schema = BookingCreateSchema()
booking_update_schema = BookingUpdateSchema()
review_create_schema = ReviewCreateSchema()


@bp.get("/users/<int:user_id>")
@login_required
def renter_bookings(user_id: int):
    require_self(user_id, "You can only view your own bookings")
    return success_response(data=booking_service.list_renter_bookings(user_id))


@bp.get("/owner/<int:user_id>")
@login_required
def owner_bookings(user_id: int):
    require_self(user_id, "You can only view bookings on your own properties")
    return success_response(data=booking_service.list_owner_bookings(user_id))


@bp.post("")
@login_required
def create_booking():
    """
    Body JSON:
    {
      "propertyID": 1,
      "startDate": "2025-07-01",
      "endDate": "2025-07-04"
    }
    """
    data = booking_create_schema.load(request.get_json(silent=True) or {})
    booking = booking_service.create_booking(data, current_user())
    return success_response(data=booking, message="Booking created successfully", status_code=201)


@bp.put("/<int:booking_id>/approve")
@login_required
def approve_booking(booking_id: int):
    booking = booking_service.change_status(booking_id, BookingStatus.APPROVED, current_user())
    return success_response(data=booking, message="Booking approved successfully")


@bp.put("/<int:booking_id>/deny")
@login_required
def deny_booking(booking_id: int):
    booking = booking_service.change_status(booking_id, BookingStatus.DENIED, current_user())
    return success_response(data=booking, message="Booking denied successfully")


@bp.post("/<int:booking_id>/review")
@login_required
def review_booking(booking_id: int):
    data = review_create_schema.load(request.get_json(silent=True) or {})
    review = booking_service.create_review(booking_id, data, current_user())
    return success_response(data=review, message="Review submitted successfully", status_code=201)


@bp.put("/<int:booking_id>")
@login_required
def update_booking(booking_id: int):
    data = booking_update_schema.load(request.get_json(silent=True) or {})
    booking = booking_service.update_booking(booking_id, data, current_user())
    return success_response(data=booking, message="Booking updated successfully")


@bp.delete("/<int:booking_id>")
@login_required
def cancel_booking(booking_id: int):
    booking_service.cancel_booking(booking_id, current_user())
    return success_response(message="Booking cancelled successfully")
