# Overview: Flask API routes for user administration; parses input and returns JSON responses.

"""
User routes.

- GET /profile: any authenticated user, their own account
- GET /: VIEW_USERS (admin)
- PUT /<id>/role: ASSIGN_ROLES (admin)
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..services import auth_service
from ..validation import ValidationError, NotFoundError
from ..decorators import require_auth, require_permission

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("/profile")
@require_auth
def profile_route():
    return jsonify({"user": g.current_user.to_dict()}), 200


@users_bp.get("")
@require_auth
@require_permission("VIEW_USERS")
def list_users_route():
    try:
        users = auth_service.list_users()
    except Exception:
        current_app.logger.exception("Failed to list users")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify([u.to_dict() for u in users]), 200


@users_bp.put("/<int:user_id>/role")
@require_auth
@require_permission("ASSIGN_ROLES")
def set_role_route(user_id: int):
    """
    Change a user's role.

    Body: {"role": "admin" | "manager" | "customer"}
    """
    data = request.get_json(silent=True) or {}
    role = data.get("role") if isinstance(data, dict) else None

    try:
        user = auth_service.set_role(user_id, role)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update role for user %s", user_id)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "User role updated successfully", "user": user.to_dict()}), 200
