from flask import Blueprint, request

from rentals.schemas.auth_schemas import LoginSchema, RegisterSchema
from rentals.services import auth_service, user_service
from rentals.utils.auth import bearer_token
from rentals.utils.errors import AuthError
from rentals.utils.responses import success_response

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()


@bp.post("/users/register")
def register():
    data = register_schema.load(request.get_json(silent=True) or {})
    user = auth_service.register_user(data)
    return success_response(
        data={"userId": user.id, "user": user_service.user_to_dict(user)},
        message="User registered successfully",
        status_code=201,
    )


@bp.post("/login")
def login():
    data = login_schema.load(request.get_json(silent=True) or {})
    result = auth_service.authenticate(data["username"], data["password"])
    return success_response(data=result, message="Login successful")


@bp.post("/logout")
def logout():
    token = bearer_token()
    if token is None:
        raise AuthError("No token provided")
    auth_service.logout(token)
    return success_response(message="Logout successful")
