from marshmallow import EXCLUDE, fields, validate, validates, ValidationError

from rentals.extensions import ma
from rentals.models.property_image import PropertyImage
from rentals.models.review import Review
from rentals.utils.uploads import public_url


class ListingCreateSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    lister_id = fields.Integer(data_key="listerId", required=False, load_default=None)
    title = fields.String(required=True, validate=validate.Length(min=1, max=255))
    description = fields.String(required=False, allow_none=True, load_default="")
    price = fields.Float(
        required=True,
        validate=validate.Range(min=0, min_inclusive=False, error="Price must be greater than 0"),
    )
    rooms = fields.Integer(required=False, load_default=1, validate=validate.Range(min=1))
    # plain string, or {"street", "city", "country"}
    location = fields.Raw(required=False, allow_none=True, load_default=None)
    images = fields.List(fields.String(), required=False, load_default=list)

    @validates("location")
    def validate_location(self, value, **kwargs):
        if value is None or isinstance(value, (str, dict)):
            return
        raise ValidationError("location must be a string or an object")


class ListingUpdateSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.String(validate=validate.Length(min=1, max=255))
    description = fields.String(allow_none=True)
    price = fields.Float(validate=validate.Range(min=0, min_inclusive=False))
    rooms = fields.Integer(validate=validate.Range(min=1))
    address = fields.String(allow_none=True)


class ImageUploadSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    image = fields.String(required=True, validate=validate.Length(min=1))
    property_id = fields.Integer(data_key="propertyID", required=False, allow_none=True, load_default=None)


class ListingSearchSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    location = fields.String(required=False, load_default=None)
    # kept as text: a non-numeric value disables the filter
    max_price = fields.String(data_key="maxPrice", required=False, load_default=None)


class PropertyImageSchema(ma.SQLAlchemySchema):
    class Meta:
        model = PropertyImage

    id = ma.auto_field(data_key="imageID")
    image_path = ma.auto_field(data_key="imagePath")
    is_primary = ma.auto_field(data_key="isPrimary")
    display_order = ma.auto_field(data_key="displayOrder")
    image_url = fields.Method("get_image_url", data_key="imageUrl")

    def get_image_url(self, obj):
        return public_url(obj.image_path)


class ReviewSchema(ma.SQLAlchemySchema):
    class Meta:
        model = Review

    id = ma.auto_field(data_key="reviewID")
    property_id = ma.auto_field(data_key="propertyID")
    renter_id = ma.auto_field(data_key="renterID")
    rating = ma.auto_field()
    comment = ma.auto_field()
    created_at = ma.auto_field(data_key="createdAt")

    username = fields.Function(lambda r: r.renter.username if r.renter else None)
    first_name = fields.Function(lambda r: r.renter.first_name if r.renter else None, data_key="fName")
    last_name = fields.Function(lambda r: r.renter.last_name if r.renter else None, data_key="lName")
