from flask import Blueprint, request

from rentals.models.booking import BookingStatus
from rentals.schemas.booking_schemas import BookingStatusSchema
from rentals.schemas.listing_schemas import (
    ImageUploadSchema,
    ListingCreateSchema,
    ListingSearchSchema,
    ListingUpdateSchema,
)
from rentals.services import booking_service, listing_service
from rentals.utils.auth import current_user, login_required
from rentals.utils.responses import success_response

bp = Blueprint("listings", __name__)

listing_create_schema = ListingCreateSchema()
listing_update_schema = ListingUpdateSchema()
listing_search_schema = ListingSearchSchema()
image_upload_schema = ImageUploadSchema()
booking_status_schema = BookingStatusSchema()


@bp.post("/upload-image")
@login_required
def upload_image():
    data = image_upload_schema.load(request.get_json(silent=True) or {})
    result = listing_service.upload_image(data, current_user())
    return success_response(data=result, message="Image uploaded", status_code=201)


@bp.post("")
@login_required
def create_listing():
    data = listing_create_schema.load(request.get_json(silent=True) or {})
    listing = listing_service.create_listing(data, current_user())
    return success_response(data=listing, message="Listing posted successfully.", status_code=201)


@bp.get("")
def search_listings():
    """
    Public search.
    Query params (optional):
    - ?location=  matched against address and name, case-insensitive
    - ?maxPrice=  upper bound on the nightly price
    """
    filters = listing_search_schema.load(request.args)
    return success_response(data=listing_service.search_listings(filters))


@bp.get("/<int:listing_id>")
def get_listing(listing_id: int):
    return success_response(data=listing_service.get_listing(listing_id))


@bp.put("/<int:listing_id>")
@login_required
def update_listing(listing_id: int):
    data = listing_update_schema.load(request.get_json(silent=True) or {})
    listing = listing_service.update_listing(listing_id, data, current_user())
    return success_response(data=listing, message="Listing updated successfully.")


@bp.delete("/<int:listing_id>")
@login_required
def delete_listing(listing_id: int):
    listing_service.delete_listing(listing_id, current_user())
    return success_response(message="Listing deleted successfully.")


@bp.get("/<int:listing_id>/bookings")
@login_required
def listing_bookings(listing_id: int):
    return success_response(data=listing_service.list_listing_bookings(listing_id, current_user()))


@bp.put("/<int:booking_id>/status")
@login_required
def update_booking_status(booking_id: int):
    # Older clients set the booking decision through the listings API
    data = booking_status_schema.load(request.get_json(silent=True) or {})
    new_status = BookingStatus.APPROVED if data["status"] == "approved" else BookingStatus.DENIED
    booking = booking_service.change_status(booking_id, new_status, current_user())
    return success_response(data=booking, message=f"Booking {booking_id} {data['status']}.")


@bp.get("/<int:listing_id>/reviews")
def listing_reviews(listing_id: int):
    return success_response(data=listing_service.list_reviews(listing_id))


@bp.get("/<int:listing_id>/images")
def listing_images(listing_id: int):
    return success_response(data=listing_service.list_images(listing_id))
