from marshmallow import EXCLUDE, fields, validate

from rentals.extensions import ma
from rentals.models.booking import Booking


class BookingCreateSchema(ma.Schema):
    """
    Body for a booking request.
    The total price is computed by the service from the nightly price.
    """

    class Meta:
        unknown = EXCLUDE

    property_id = fields.Integer(data_key="propertyID", required=True)
    renter_id = fields.Integer(data_key="renterID", required=False, load_default=None)
    start_date = fields.Date(data_key="startDate", required=True)  # YYYY-MM-DD
    end_date = fields.Date(data_key="endDate", required=True)


class BookingUpdateSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    start_date = fields.Date(data_key="startDate", required=True)
    end_date = fields.Date(data_key="endDate", required=True)


class BookingStatusSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    status = fields.String(
        required=True,
        validate=validate.OneOf(
            ["approved", "denied"],
            error='Invalid status value. Must be "approved" or "denied".',
        ),
    )


class ReviewCreateSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    rating = fields.Integer(
        required=True,
        strict=True,
        validate=validate.Range(min=1, max=5, error="Rating must be between 1 and 5"),
    )
    comment = fields.String(
        required=False,
        allow_none=True,
        load_default="",
        validate=validate.Length(max=1000),
    )


class BookingSchema(ma.SQLAlchemySchema):
    class Meta:
        model = Booking

    id = ma.auto_field(data_key="bookingID")
    property_id = ma.auto_field(data_key="propertyID")
    renter_id = ma.auto_field(data_key="renterID")
    start_date = ma.auto_field(data_key="startDate")
    end_date = ma.auto_field(data_key="endDate")
    total_price = fields.Float(data_key="totalPrice")
    status = ma.auto_field(data_key="bookingStatus")
    created_at = ma.auto_field(data_key="createdAt")


class RenterBookingSchema(BookingSchema):
    """Renter view: adds the property being rented."""

    property_name = fields.Function(lambda b: b.property.name, data_key="propertyName")
    address = fields.Function(lambda b: b.property.address, data_key="pAddress")
    price_per_night = fields.Function(lambda b: float(b.property.price_per_night), data_key="pricePerNight")


class OwnerBookingSchema(BookingSchema):
    """Owner view: adds the renter contact details."""

    property_name = fields.Function(lambda b: b.property.name, data_key="propertyName")
    address = fields.Function(lambda b: b.property.address, data_key="pAddress")
    username = fields.Function(lambda b: b.renter.username)
    email = fields.Function(lambda b: b.renter.email)
