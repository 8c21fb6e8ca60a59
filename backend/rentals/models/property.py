from datetime import datetime

from rentals.extensions import db


class Property(db.Model):
    __tablename__ = "properties"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)

    owner_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    address = db.Column(db.String(500), nullable=False, default="")
    price_per_night = db.Column(db.Numeric(10, 2), nullable=False)
    rooms = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    owner = db.relationship("User", back_populates="properties", lazy="joined")

    images = db.relationship(
        "PropertyImage",
        back_populates="property",
        cascade="all, delete-orphan",
        order_by="PropertyImage.display_order",
    )
    bookings = db.relationship(
        "Booking",
        back_populates="property",
        cascade="all, delete-orphan",
    )
    reviews = db.relationship(
        "Review",
        back_populates="property",
        cascade="all, delete-orphan",
    )

    @property
    def primary_image(self):
        return next((img for img in self.images if img.is_primary), None)

    def __repr__(self) -> str:
        return f"<Property id={self.id} owner={self.owner_id} name={self.name}>"
