from flask import Blueprint, request, jsonify, g

from security.rbac import require_action
from services import users as user_service

users_bp = Blueprint("users", __name__, url_prefix="/users")


@users_bp.get("")
@require_action("manage_users")
def list_users():
    return jsonify(user_service.list_users(g.principal)), 200


@users_bp.post("/<int:user_id>/role")
@require_action("manage_users")
def update_user_role(user_id: int):
    data = request.get_json(silent=True) or {}
    role = data.get("role")
    if not isinstance(role, str) or not role.strip():
        return jsonify(error="role required"), 400

    user = user_service.set_role(g.principal, user_id, role.strip().lower())
    return jsonify(message="Role updated", user=user_service.serialize_user(user)), 200
