# Overview: Flask API routes for orders; parses input and returns JSON responses.

# backend/storefront/routes/orders.py
"""Order API routes with permission enforcement"""

from flask import Blueprint, request, jsonify, g, current_app

from ..services import order_service
from ..services.order_service import InsufficientStockError
from ..validation import ValidationError, NotFoundError, ForbiddenError
from ..decorators import require_auth, require_permission


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.post("")
@require_auth
@require_permission("CREATE_ORDER")
def create_order_route():
    """
    Checkout: create an order from a cart.

    Body: {"items": [{"productId": 1, "quantity": 2}, ...], "address": "..."}

    Requires: CREATE_ORDER permission
    Available to: admin, manager, customer
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        order = order_service.checkout(
            user_id=g.current_user.id,
            items=data.get("items"),
            address=data.get("address"),
        )
    except InsufficientStockError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to create order for user %s", g.current_user.id)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "message": "Order created successfully",
        "order": order.to_dict(),
    }), 201


@orders_bp.get("")
@require_auth
def list_orders_route():
    """Admins and managers see every order; other users see their own. Returns a JSON array."""
    try:
        orders = order_service.list_orders(g.current_user)
    except Exception:
        current_app.logger.exception("Failed to list orders for user %s", g.current_user.id)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify([o.to_dict(include_user=True) for o in orders]), 200


@orders_bp.get("/mine")
@require_auth
def list_my_orders_route():
    try:
        orders = order_service.list_user_orders(g.current_user.id)
    except Exception:
        current_app.logger.exception("Failed to list own orders for user %s", g.current_user.id)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify([o.to_dict() for o in orders]), 200


@orders_bp.get("/<int:order_id>")
@require_auth
def get_order_route(order_id: int):
    """Owner, or anyone holding VIEW_ALL_ORDERS."""
    try:
        order = order_service.get_order_for_user(order_id, g.current_user)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ForbiddenError as e:
        return jsonify({"error": str(e)}), 403
    except Exception:
        current_app.logger.exception("Failed to load order %s", order_id)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"order": order.to_dict(include_user=True)}), 200


@orders_bp.put("/<int:order_id>")
@require_auth
@require_permission("UPDATE_ORDER_STATUS")
def update_order_status_route(order_id: int):
    """
    Update order status.

    Requires: UPDATE_ORDER_STATUS permission
    Available to: admin, manager
    """
    data = request.get_json(silent=True) or {}
    status = data.get("status") if isinstance(data, dict) else None

    try:
        order = order_service.set_status(order_id, status)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update status of order %s", order_id)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "message": "Order status updated successfully",
        "order": order.to_dict(include_user=True),
    }), 200


@orders_bp.delete("/<int:order_id>")
@require_auth
@require_permission("DELETE_ORDER")
def delete_order_route(order_id: int):
    """
    Delete an order and its lines. Stock is not restored.

    Requires: DELETE_ORDER permission
    Available to: admin
    """
    try:
        order_service.delete_order(order_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete order %s", order_id)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "Order deleted successfully"}), 200
