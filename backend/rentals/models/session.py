from datetime import datetime

from rentals.extensions import db


class Session(db.Model):
    """Server-side login session; ``token`` is the bearer credential."""

    __tablename__ = "sessions"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)

    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token = db.Column(db.String(64), unique=True, nullable=False, index=True)
    expiry = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    user = db.relationship("User", back_populates="sessions", lazy="joined")
