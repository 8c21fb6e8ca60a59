from typing import Optional

from flask import current_app
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from rentals.extensions import db
from rentals.models import Booking, Property, PropertyImage, Review, Session, User
from rentals.schemas.auth_schemas import UserSchema
from rentals.utils.crypto import hash_password
from rentals.utils.errors import ApiError, NotFoundError
from rentals.utils.uploads import remove_upload

user_schema = UserSchema()


def get_user(user_id: int) -> Optional[User]:
    return User.query.get(user_id)


def user_to_dict(user: User) -> dict:
    return user_schema.dump(user)


def update_user(user_id: int, data: dict) -> User:
    user = get_user(user_id)
    if not user:
        raise NotFoundError("User not found")

    if not data:
        raise ApiError("No fields to update", 400)

    if "username" in data:
        username = data["username"].strip()
        taken = User.query.filter(User.username == username, User.id != user.id).first()
        if taken:
            raise ApiError("Username already exists", 409)
        user.username = username

    if "password" in data:
        user.password_hash, user.salt = hash_password(data["password"])

    for field in ("role", "email", "first_name", "last_name"):
        if field in data:
            setattr(user, field, data[field])

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ApiError("Username already exists", 409)

    current_app.logger.info("[users] updated user id=%s fields=%s", user.id, sorted(data))
    return user


def delete_user(user_id: int) -> None:
    """
    Delete a user with everything that hangs off it, in one transaction:
    their reviews and bookings, the reviews/bookings/images of the
    properties they own, the properties, their sessions and the user row.
    """
    user = get_user(user_id)
    if not user:
        raise NotFoundError("User not found")

    owned = select(Property.id).where(Property.owner_id == user_id)
    image_paths = [
        path for (path,) in
        db.session.query(PropertyImage.image_path).filter(PropertyImage.property_id.in_(owned)).all()
    ]

    try:
        Review.query.filter(Review.renter_id == user_id).delete(synchronize_session=False)
        Booking.query.filter(Booking.renter_id == user_id).delete(synchronize_session=False)
        Review.query.filter(Review.property_id.in_(owned)).delete(synchronize_session=False)
        Booking.query.filter(Booking.property_id.in_(owned)).delete(synchronize_session=False)
        PropertyImage.query.filter(PropertyImage.property_id.in_(owned)).delete(synchronize_session=False)
        Property.query.filter(Property.owner_id == user_id).delete(synchronize_session=False)
        Session.query.filter(Session.user_id == user_id).delete(synchronize_session=False)
        User.query.filter(User.id == user_id).delete(synchronize_session=False)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("[users] delete failed user id=%s", user_id)
        raise ApiError("Internal server error while deleting user", 500)

    current_app.logger.info("[users] deleted user id=%s images=%s", user_id, len(image_paths))

    for path in image_paths:
        try:
            remove_upload(path)
        except OSError:
            current_app.logger.warning("[users] could not remove upload %s", path)
