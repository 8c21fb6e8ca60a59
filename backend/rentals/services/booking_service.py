from datetime import date
from decimal import Decimal
from typing import Any, Dict, List

from flask import current_app
from sqlalchemy.exc import IntegrityError

from rentals.extensions import db
from rentals.models import Booking, BookingStatus, Property, Review, User
from rentals.schemas.booking_schemas import BookingSchema, OwnerBookingSchema, RenterBookingSchema
from rentals.schemas.listing_schemas import ReviewSchema
from rentals.utils.errors import ApiError, ForbiddenError, NotFoundError

booking_schema = BookingSchema()
renter_booking_list_schema = RenterBookingSchema(many=True)
owner_booking_list_schema = OwnerBookingSchema(many=True)
review_schema = ReviewSchema()


def count_nights(start_date: date, end_date: date) -> int:
    nights = (end_date - start_date).days
    if nights <= 0:
        raise ApiError("Invalid date range", 400)
    return nights


def quote_total(prop: Property, start_date: date, end_date: date) -> Decimal:
    nights = count_nights(start_date, end_date)
    return Decimal(prop.price_per_night) * nights


def _get_booking(booking_id: int) -> Booking:
    booking = Booking.query.get(booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


def _require_renter(booking: Booking, user: User, action: str) -> None:
    if booking.renter_id != user.id:
        raise ForbiddenError(f"You are not authorized to {action} this booking")


def _require_pending(booking: Booking, action: str) -> None:
    if booking.status != BookingStatus.PENDING:
        raise ApiError(f"Can only {action} pending bookings", 400)


def booking_to_dict(booking: Booking) -> Dict[str, Any]:
    return booking_schema.dump(booking)


def create_booking(data: Dict[str, Any], user: User) -> Dict[str, Any]:
    renter_id = data.get("renter_id")
    if renter_id is not None and renter_id != user.id:
        raise ForbiddenError("You can only create bookings for your own account")

    prop = Property.query.get(data["property_id"])
    if not prop:
        raise NotFoundError("Property not found")

    if prop.owner_id == user.id:
        raise ApiError("You cannot book your own property", 400)

    total = quote_total(prop, data["start_date"], data["end_date"])

    booking = Booking(
        property_id=prop.id,
        renter_id=user.id,
        start_date=data["start_date"],
        end_date=data["end_date"],
        total_price=total,
        status=BookingStatus.PENDING,
    )
    db.session.add(booking)
    db.session.commit()

    current_app.logger.info(
        "[bookings] created id=%s property=%s renter=%s total=%s",
        booking.id,
        prop.id,
        user.id,
        total,
    )
    return booking_to_dict(booking)


def update_booking(booking_id: int, data: Dict[str, Any], user: User) -> Dict[str, Any]:
    booking = _get_booking(booking_id)
    _require_renter(booking, user, "edit")
    _require_pending(booking, "edit")

    booking.total_price = quote_total(booking.property, data["start_date"], data["end_date"])
    booking.start_date = data["start_date"]
    booking.end_date = data["end_date"]
    db.session.commit()

    current_app.logger.info("[bookings] updated id=%s total=%s", booking.id, booking.total_price)
    return booking_to_dict(booking)


def cancel_booking(booking_id: int, user: User) -> None:
    booking = _get_booking(booking_id)
    _require_renter(booking, user, "cancel")
    _require_pending(booking, "cancel")

    db.session.delete(booking)
    db.session.commit()

    current_app.logger.info("[bookings] cancelled id=%s renter=%s", booking_id, user.id)


def _overlaps_approved(booking: Booking) -> bool:
    clash = (
        Booking.query.filter(
            Booking.property_id == booking.property_id,
            Booking.id != booking.id,
            Booking.status == BookingStatus.APPROVED,
            Booking.start_date < booking.end_date,
            Booking.end_date > booking.start_date,
        )
        .first()
    )
    return clash is not None


def change_status(booking_id: int, new_status: str, user: User) -> Dict[str, Any]:
    """Owner decision on a pending booking: Approved or Denied."""
    if new_status not in (BookingStatus.APPROVED, BookingStatus.DENIED):
        raise ApiError('Invalid status value. Must be "approved" or "denied".', 400)

    booking = _get_booking(booking_id)
    if booking.property.owner_id != user.id:
        raise ForbiddenError("Only the property owner can approve or deny bookings")

    if booking.status != BookingStatus.PENDING:
        raise ApiError(f"Cannot change status. Booking is already {booking.status}.", 400)

    if new_status == BookingStatus.APPROVED and _overlaps_approved(booking):
        raise ApiError("Booking dates overlap an approved booking", 409)

    booking.status = new_status
    db.session.commit()

    current_app.logger.info("[bookings] id=%s -> %s by owner=%s", booking.id, new_status, user.id)
    return booking_to_dict(booking)


def create_review(booking_id: int, data: Dict[str, Any], user: User) -> Dict[str, Any]:
    booking = _get_booking(booking_id)
    _require_renter(booking, user, "review")

    if booking.status != BookingStatus.APPROVED:
        raise ApiError("Can only review approved bookings", 400)

    existing = Review.query.filter_by(property_id=booking.property_id, renter_id=booking.renter_id).first()
    if existing:
        raise ApiError("You have already reviewed this property", 400)

    review = Review(
        property_id=booking.property_id,
        renter_id=booking.renter_id,
        rating=data["rating"],
        comment=(data.get("comment") or "").strip(),
    )
    db.session.add(review)

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ApiError("You have already reviewed this property", 400)

    current_app.logger.info("[bookings] review id=%s property=%s rating=%s", review.id, review.property_id, review.rating)
    return review_schema.dump(review)


def list_renter_bookings(renter_id: int) -> List[Dict[str, Any]]:
    bookings = (
        Booking.query.filter(Booking.renter_id == renter_id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .all()
    )
    return renter_booking_list_schema.dump(bookings)


def list_owner_bookings(owner_id: int) -> List[Dict[str, Any]]:
    bookings = (
        Booking.query.join(Property, Booking.property_id == Property.id)
        .filter(Property.owner_id == owner_id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .all()
    )
    return owner_booking_list_schema.dump(bookings)
