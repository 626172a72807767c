"""Account endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from learnhub.api.deps import build_identity_service, current_actor_id, json_response, require_roles, timing
from learnhub.schemas import RolesUpdateSchema, UserSchema
from learnhub.services.identity.dto import RolesUpdateIn

bp = Blueprint("users", __name__, url_prefix="/users")

user_schema = UserSchema()
user_list_schema = UserSchema(many=True)
roles_update_schema = RolesUpdateSchema()


@bp.get("/me")
@require_roles("users.me")
@timing
def me():
    """Return the authenticated account."""

    user = build_identity_service().get_profile(current_actor_id())
    return json_response({"data": user_schema.dump(user)})


@bp.get("")
@require_roles("users.list")
@timing
def list_users():
    """Return all accounts (administrators only)."""

    users = build_identity_service().list_users()
    return json_response({"data": user_list_schema.dump(users)})


@bp.patch("/<string:user_id>/roles")
@require_roles("users.update_roles")
@timing
def update_roles(user_id: str):
    """Replace an account's roles (administrators only)."""

    payload = roles_update_schema.load(request.get_json(silent=True) or {})
    user = build_identity_service().update_roles(
        RolesUpdateIn(user_id=user_id, roles=tuple(payload["roles"]))
    )
    return json_response({"data": user_schema.dump(user)})
