from datetime import datetime

from rentals.extensions import db


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)

    username = db.Column(db.String(100), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(64), nullable=False)
    salt = db.Column(db.String(32), nullable=False)

    role = db.Column(db.String(20), nullable=False, default="user")
    email = db.Column(db.String(255), nullable=True)
    first_name = db.Column(db.String(100), nullable=False, default="")
    last_name = db.Column(db.String(100), nullable=False, default="")

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    properties = db.relationship("Property", back_populates="owner", passive_deletes=True)
    sessions = db.relationship("Session", back_populates="user", passive_deletes=True)

    @property
    def display_name(self) -> str | None:
        if not self.first_name:
            return None
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username}>"
