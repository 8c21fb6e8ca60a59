import math
import re
from decimal import Decimal
from typing import Any, Dict, List, Optional

from flask import current_app
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from rentals.extensions import db
from rentals.models import Booking, Property, PropertyImage, Review, User
from rentals.schemas.booking_schemas import BookingSchema
from rentals.schemas.listing_schemas import PropertyImageSchema, ReviewSchema
from rentals.utils.errors import ApiError, ForbiddenError, NotFoundError
from rentals.utils.uploads import decode_data_url, public_url, remove_upload, save_data_url

booking_list_schema = BookingSchema(many=True)
image_list_schema = PropertyImageSchema(many=True)
review_list_schema = ReviewSchema(many=True)

# leading decimal number, e.g. "100usd" -> 100
LEADING_NUMBER_RE = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _ratings_subquery():
    return (
        db.session.query(
            Review.property_id.label("property_id"),
            func.avg(Review.rating).label("rating"),
        )
        .group_by(Review.property_id)
        .subquery()
    )


def listing_to_dict(prop: Property, rating=None) -> Dict[str, Any]:
    primary = prop.primary_image
    image_path = primary.image_path if primary else None
    return {
        "propertyID": prop.id,
        "ownerID": prop.owner_id,
        "propertyName": prop.name,
        "pDescription": prop.description,
        "pAddress": prop.address,
        "pricePerNight": float(prop.price_per_night),
        "rooms": prop.rooms,
        "imagePath": image_path,
        "image": public_url(image_path) or current_app.config.get("PLACEHOLDER_IMAGE_URL"),
        "rating": float(rating or 0),
        "owner": prop.owner.display_name if prop.owner else None,
        "dateListed": prop.created_at.isoformat() if prop.created_at else None,
    }


def _address_from_location(location) -> str:
    if isinstance(location, dict):
        parts = [location.get(k) for k in ("street", "city", "country")]
        return ", ".join(str(p).strip() for p in parts if p)
    if isinstance(location, str):
        return location.strip()
    return ""


def _get_property(property_id: int) -> Property:
    prop = Property.query.get(property_id)
    if not prop:
        raise NotFoundError("Listing not found")
    return prop


def _require_owner(prop: Property, user: User, action: str) -> None:
    if prop.owner_id != user.id:
        raise ForbiddenError(f"You are not authorized to {action} this property")


def create_listing(data: Dict[str, Any], user: User) -> Dict[str, Any]:
    lister_id = data.get("lister_id")
    if lister_id is not None and lister_id != user.id:
        raise ForbiddenError("You can only create listings for your own account")

    # decode everything up front so a bad image leaves nothing behind
    images = data.get("images") or []
    for image in images:
        decode_data_url(image)

    saved: List[str] = []
    try:
        prop = Property(
            owner_id=user.id,
            name=data["title"].strip(),
            description=(data.get("description") or "").strip(),
            address=_address_from_location(data.get("location")),
            price_per_night=Decimal(str(data["price"])),
            rooms=data.get("rooms") or 1,
        )
        db.session.add(prop)
        db.session.flush()

        for idx, image in enumerate(images):
            path = save_data_url(image)
            saved.append(path)
            db.session.add(
                PropertyImage(
                    property_id=prop.id,
                    image_path=path,
                    is_primary=(idx == 0),
                    display_order=idx,
                )
            )

        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        _discard_uploads(saved)
        raise ApiError("Internal server error while creating listing", 500)
    except (OSError, SQLAlchemyError):
        # no row and no file survives a failed create
        db.session.rollback()
        _discard_uploads(saved)
        raise

    current_app.logger.info("[listings] created id=%s owner=%s images=%s", prop.id, user.id, len(saved))
    return listing_to_dict(prop)


def parse_price_limit(raw) -> Optional[float]:
    """Leading number of ``raw`` ("100usd" -> 100.0); None when absent, non-numeric or not finite."""
    if raw is None:
        return None
    match = LEADING_NUMBER_RE.match(str(raw))
    if not match:
        return None
    value = float(match.group(0))
    if not math.isfinite(value):
        return None
    return value


def _discard_uploads(paths: List[str]) -> None:
    for path in paths:
        try:
            remove_upload(path)
        except OSError:
            current_app.logger.warning("[listings] could not remove upload %s", path)


def search_listings(filters: Dict[str, Any]) -> List[Dict[str, Any]]:
    ratings = _ratings_subquery()
    query = (
        db.session.query(Property, ratings.c.rating)
        .outerjoin(ratings, ratings.c.property_id == Property.id)
    )

    location = (filters.get("location") or "").strip()
    if location:
        term = f"%{location.lower()}%"
        query = query.filter(
            or_(func.lower(Property.address).like(term), func.lower(Property.name).like(term))
        )

    price_limit = parse_price_limit(filters.get("max_price"))
    if price_limit is not None:
        query = query.filter(Property.price_per_night <= price_limit)

    if filters.get("owner_id") is not None:
        query = query.filter(Property.owner_id == filters["owner_id"])

    rows = query.order_by(Property.created_at.desc(), Property.id.desc()).all()
    return [listing_to_dict(prop, rating) for prop, rating in rows]


def list_owner_listings(owner_id: int) -> List[Dict[str, Any]]:
    return search_listings({"owner_id": owner_id})


def get_listing(property_id: int) -> Dict[str, Any]:
    prop = _get_property(property_id)
    rating = (
        db.session.query(func.avg(Review.rating))
        .filter(Review.property_id == prop.id)
        .scalar()
    )
    return listing_to_dict(prop, rating)


def update_listing(property_id: int, data: Dict[str, Any], user: User) -> Dict[str, Any]:
    prop = _get_property(property_id)
    _require_owner(prop, user, "edit")

    if not data:
        raise ApiError("No fields to update", 400)

    if "title" in data:
        prop.name = data["title"].strip()
    if "description" in data:
        prop.description = (data["description"] or "").strip()
    if "price" in data:
        prop.price_per_night = Decimal(str(data["price"]))
    if "rooms" in data:
        prop.rooms = data["rooms"]
    if "address" in data:
        prop.address = (data["address"] or "").strip()

    db.session.commit()

    current_app.logger.info("[listings] updated id=%s fields=%s", prop.id, sorted(data))
    return get_listing(prop.id)


def delete_listing(property_id: int, user: User) -> None:
    prop = _get_property(property_id)
    _require_owner(prop, user, "delete")

    paths = [img.image_path for img in prop.images]

    # images, bookings and reviews go with it (ORM cascade)
    db.session.delete(prop)
    db.session.commit()

    current_app.logger.info("[listings] deleted id=%s owner=%s", property_id, user.id)
    _discard_uploads(paths)


def list_listing_bookings(property_id: int, user: User) -> List[Dict[str, Any]]:
    prop = _get_property(property_id)
    _require_owner(prop, user, "view bookings of")

    bookings = (
        Booking.query.filter(Booking.property_id == prop.id)
        .order_by(Booking.start_date.asc(), Booking.id.asc())
        .all()
    )
    return booking_list_schema.dump(bookings)


def list_reviews(property_id: int) -> List[Dict[str, Any]]:
    prop = _get_property(property_id)
    reviews = (
        Review.query.filter(Review.property_id == prop.id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .all()
    )
    return review_list_schema.dump(reviews)


def list_images(property_id: int) -> List[Dict[str, Any]]:
    prop = _get_property(property_id)
    images = (
        PropertyImage.query.filter(PropertyImage.property_id == prop.id)
        .order_by(PropertyImage.is_primary.desc(), PropertyImage.display_order.asc(), PropertyImage.id.asc())
        .all()
    )
    return image_list_schema.dump(images)


def upload_image(data: Dict[str, Any], user: User) -> Dict[str, Any]:
    """
    Store one base64 image. With ``property_id`` the image is attached to
    that listing; the first image of a listing becomes its primary image.
    """
    prop: Optional[Property] = None
    if data.get("property_id") is not None:
        prop = _get_property(data["property_id"])
        _require_owner(prop, user, "add images to")

    path = save_data_url(data["image"])

    result: Dict[str, Any] = {"imagePath": path, "imageUrl": public_url(path)}
    if prop is None:
        return result

    try:
        count = PropertyImage.query.filter_by(property_id=prop.id).count()
        image = PropertyImage(
            property_id=prop.id,
            image_path=path,
            is_primary=(count == 0),
            display_order=count,
        )
        db.session.add(image)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        _discard_uploads([path])
        raise

    current_app.logger.info("[listings] image id=%s attached to property=%s", image.id, prop.id)
    result.update({"imageID": image.id, "isPrimary": image.is_primary, "displayOrder": image.display_order})
    return result
