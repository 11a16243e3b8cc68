# Overview: Request and permission decorators for API routes.

from functools import wraps
from flask import request, jsonify, g, current_app

from .extensions import db
from .models import User
from .permissions import is_allowed
from .services import token_service
from .services.token_service import TokenError


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user')


def require_auth(f):
    """
    Require a valid bearer token.

    Sets g.current_user to the User row named by the token. The role used for
    authorization is read from that row, so a role change takes effect on the
    next request even if the token still carries the old role.

    SECURITY: Returns 401 if:
    - No Authorization header
    - Invalid or expired token
    - Token names a user that no longer exists
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"error": "Authentication required"}), 401

        token = auth_header.split(" ", 1)[1].strip()

        try:
            claims = token_service.decode_token(token)
        except TokenError as e:
            return jsonify({"error": str(e)}), 401

        user = db.session.get(User, claims.user_id)
        if not user:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = user

        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """
    Require a specific permission, resolved through the role policy table.
    Must be stacked under @require_auth.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Ensure @require_auth was called first
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            user = g.current_user
            if not is_allowed(user.role, permission_code):
                current_app.logger.warning(
                    "Permission denied: user_id=%s role=%s permission=%s path=%s",
                    user.id, user.role, permission_code, request.path,
                )
                return jsonify({
                    "error": "Permission denied",
                    "required_permission": permission_code,
                    "message": f"Access Denied: {user.role} role does not have permission.",
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
