from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy.exc import IntegrityError

from rentals.extensions import db
from rentals.models.session import Session
from rentals.models.user import User
from rentals.services import user_service
from rentals.utils.crypto import generate_session_token, hash_password, verify_password
from rentals.utils.errors import ApiError


def register_user(data: dict) -> User:
    username = data["username"].strip()

    if User.query.filter_by(username=username).first():
        raise ApiError("Username already exists", 409)

    password_hash, salt = hash_password(data["password"])

    user = User(
        username=username,
        password_hash=password_hash,
        salt=salt,
        role=data.get("role") or "user",
        email=data.get("email"),
        first_name=(data.get("first_name") or "").strip(),
        last_name=(data.get("last_name") or "").strip(),
    )
    db.session.add(user)

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ApiError("Username already exists", 409)

    current_app.logger.info("[auth] registered user id=%s username=%s", user.id, user.username)
    return user


def create_session(user: User) -> Session:
    ttl_hours = int(current_app.config.get("SESSION_TTL_HOURS") or 24)
    session = Session(
        user_id=user.id,
        token=generate_session_token(),
        expiry=datetime.utcnow() + timedelta(hours=ttl_hours),
    )
    db.session.add(session)
    db.session.commit()
    return session


def authenticate(username: str, password: str) -> dict:
    user = User.query.filter_by(username=(username or "").strip()).first()

    if not user or not verify_password(password, user.password_hash, user.salt):
        current_app.logger.info("[auth] failed login username=%s", username)
        raise ApiError("Invalid credentials", 401)

    session = create_session(user)
    current_app.logger.info("[auth] login user id=%s", user.id)

    return {
        "token": session.token,
        "expiresAt": session.expiry.isoformat(),
        "user": user_service.user_to_dict(user),
    }


def logout(token: str) -> int:
    deleted = Session.query.filter_by(token=token).delete(synchronize_session=False)
    db.session.commit()
    current_app.logger.info("[auth] logout removed=%s", deleted)
    return deleted


def purge_expired_sessions(now: datetime | None = None) -> int:
    cutoff = now or datetime.utcnow()
    deleted = Session.query.filter(Session.expiry <= cutoff).delete(synchronize_session=False)
    db.session.commit()
    return deleted
