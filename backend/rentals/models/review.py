from datetime import datetime

from rentals.extensions import db


class Review(db.Model):
	__tablename__ = "reviews"
	__table_args__ = (
		db.UniqueConstraint("property_id", "renter_id", name="uq_reviews_property_renter"),
	)

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

	rating = db.Column(db.Integer, nullable=False)
	comment = db.Column(db.Text, nullable=False, default="")

	created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

	property = db.relationship("Property", back_populates="reviews")
	renter = db.relationship("User", foreign_keys=[renter_id], lazy="joined")
