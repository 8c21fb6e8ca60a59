from datetime import datetime

from rentals.extensions import db


class BookingStatus:
    PENDING = "Pending"
    APPROVED = "Approved"
    DENIED = "Denied"

    ALL = (PENDING, APPROVED, DENIED)


class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)

    property_id = db.Column(
        db.Integer,
        db.ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    renter_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    total_price = db.Column(db.Numeric(10, 2), nullable=False)

    status = db.Column(db.String(20), nullable=False, default=BookingStatus.PENDING)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    property = db.relationship("Property", back_populates="bookings", lazy="joined")
    renter = db.relationship("User", foreign_keys=[renter_id], lazy="joined")

    def __repr__(self) -> str:
        return f"<Booking id={self.id} property={self.property_id} status={self.status}>"
