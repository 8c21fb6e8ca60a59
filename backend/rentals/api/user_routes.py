from flask import Blueprint, request

from rentals.schemas.auth_schemas import UserUpdateSchema
from rentals.services import listing_service, user_service
from rentals.utils.auth import current_user, login_required, require_self
from rentals.utils.responses import success_response

bp = Blueprint("users", __name__)

user_update_schema = UserUpdateSchema()


@bp.get("/me")
@login_required
def me():
    return success_response(data=user_service.user_to_dict(current_user()), message="Current user")


@bp.put("/<int:user_id>")
@login_required
def update_user(user_id: int):
    require_self(user_id)
    data = user_update_schema.load(request.get_json(silent=True) or {})
    user = user_service.update_user(user_id, data)
    return success_response(data=user_service.user_to_dict(user), message="User updated successfully")


@bp.delete("/<int:user_id>")
@login_required
def delete_user(user_id: int):
    require_self(user_id)
    user_service.delete_user(user_id)
    return success_response(message="User and associated data deleted successfully")


@bp.get("/<int:user_id>/listings")
@login_required
def user_listings(user_id: int):
    return success_response(data=listing_service.list_owner_listings(user_id))
