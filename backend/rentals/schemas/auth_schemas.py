from marshmallow import EXCLUDE, fields, validate

from rentals.extensions import ma
from rentals.models.user import User


class RegisterSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True, validate=validate.Length(min=1, max=100))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))
    # empty role falls back to "user" in the service
    role = fields.String(required=False, allow_none=True, load_default="user", validate=validate.Length(max=20))
    email = fields.Email(required=False, allow_none=True, load_default=None)
    first_name = fields.String(data_key="firstName", required=False, load_default="")
    last_name = fields.String(data_key="lastName", required=False, load_default="")


class LoginSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True, validate=validate.Length(min=1))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))


class UserUpdateSchema(ma.Schema):
    """Partial update; only keys present in the body are applied."""

    class Meta:
        unknown = EXCLUDE

    username = fields.String(validate=validate.Length(min=1, max=100))
    password = fields.String(load_only=True, validate=validate.Length(min=1))
    role = fields.String(validate=validate.Length(min=1, max=20))
    email = fields.Email(allow_none=True)
    first_name = fields.String(data_key="firstName")
    last_name = fields.String(data_key="lastName")


class UserSchema(ma.SQLAlchemySchema):
    class Meta:
        model = User

    id = ma.auto_field()
    username = ma.auto_field()
    role = ma.auto_field()
    email = ma.auto_field()
    first_name = ma.auto_field(data_key="firstName")
    last_name = ma.auto_field(data_key="lastName")
