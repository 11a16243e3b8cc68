# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/storefront/routes/auth.py
"""
Authentication API routes

- POST /register: self-registration, always as customer
- POST /login: email + password, returns a bearer token
- GET /me: the authenticated user
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import token_service
from ..validation import ValidationError, ConflictError
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

REGISTER_FIELDS = {"username", "email", "password"}


@auth_bp.post("/register")
def register_route():
    """
    Register a new customer account and return a token for it.

    Roles cannot be chosen at registration; an admin assigns them later.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    unknown = sorted(set(data) - REGISTER_FIELDS)
    if unknown:
        return jsonify({"error": f"Field not allowed: {unknown[0]}"}), 400

    try:
        user = auth_service.register(
            data.get("username"),
            data.get("email"),
            data.get("password"),
        )
        token = token_service.issue_token(user)
    except ValidationError as e:
        return jsonify({"error": "Validation failed", "message": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "message": "User registered successfully",
        "token": token,
        "user": user.to_dict(),
    }), 201


@auth_bp.post("/login")
def login_route():
    """Authenticate by email and password; returns user info and a bearer token."""
    data = request.get_json(silent=True) or {}
    email = data.get("email") if isinstance(data, dict) else None
    password = data.get("password") if isinstance(data, dict) else None

    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        return jsonify({"error": "email and password required"}), 400

    try:
        user = auth_service.authenticate(email, password)
        if not user:
            return jsonify({"error": "Invalid email or password"}), 401
        token = token_service.issue_token(user)
    except Exception:
        current_app.logger.exception("Failed to log in")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "message": "Login successful",
        "token": token,
        "user": user.to_dict(),
    }), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"user": g.current_user.to_dict()}), 200
