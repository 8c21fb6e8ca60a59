from datetime import datetime
from functools import wraps

from flask import current_app, g, request

from rentals.extensions import db
from rentals.models.session import Session
from rentals.models.user import User
from rentals.utils.errors import AuthError, ForbiddenError

BEARER_PREFIX = "Bearer "


def bearer_token() -> str | None:
    """Token from ``Authorization: Bearer <token>``, or None."""
    header = request.headers.get("Authorization") or ""
    if not header.startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX):].strip()
    return token or None


def lookup_session_user(token: str) -> User | None:
    return (
        db.session.query(User)
        .join(Session, Session.user_id == User.id)
        .filter(Session.token == token, Session.expiry > datetime.utcnow())
        .first()
    )


def login_required(view):
    """Resolve the bearer session to a user and expose it as ``g.current_user``."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        token = bearer_token()
        if token is None:
            current_app.logger.info("[auth] missing or malformed Authorization header")
            raise AuthError("Authentication required")

        user = lookup_session_user(token)
        if user is None:
            current_app.logger.info("[auth] session not found or expired token=%s...", token[:10])
            raise AuthError("Invalid or expired session")

        g.current_user = user
        return view(*args, **kwargs)

    return wrapper


def current_user() -> User:
    user = g.get("current_user")
    if user is None:
        raise AuthError("Authentication required")
    return user


def require_self(user_id: int, message: str = "You can only manage your own account") -> User:
    user = current_user()
    if user.id != user_id:
        raise ForbiddenError(message)
    return user
