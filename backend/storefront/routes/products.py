# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/storefront/routes/products.py
"""
Product catalog routes.

SECURITY:
- Read operations are public
- Create/update require MANAGE_PRODUCTS (admin, manager)
- Delete requires DELETE_PRODUCT (admin)
"""
from flask import Blueprint, request, current_app

from ..services import products_service
from ..models import Product
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    parse_pagination,
    coerce_int,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from ..decorators import require_auth, require_permission

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "price_cents", "stock", "image", "category_id"},
    required_on_create={"name", "price_cents", "category_id"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products():
    """
    List products, newest first.

    Query params:
    - category_id: int (optional) - only products directly in this category
    - page: int (optional) - page number (1-indexed). If omitted, returns all items.
    - limit: int (optional) - items per page (default DEFAULT_PAGE_SIZE, max MAX_PAGE_SIZE)
    """
    try:
        category_id = request.args.get("category_id")
        category_id = coerce_int(category_id, "category_id") if category_id else None

        page = limit = None
        if request.args.get("page") or request.args.get("limit"):
            page, limit = parse_pagination(
                request.args.get("page"),
                request.args.get("limit"),
                default_limit=current_app.config["DEFAULT_PAGE_SIZE"],
                max_limit=current_app.config["MAX_PAGE_SIZE"],
            )
    except ValidationError as e:
        return {"error": str(e)}, 400

    return products_service.list_products(category_id=category_id, page=page, per_page=limit)


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    try:
        product = products_service.get_product(product_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    return {"product": product.to_dict()}, 200


@products_bp.post("")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def create_product_route():
    """
    Create a new product.

    Requires MANAGE_PRODUCTS permission.
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        created = products_service.create_product(patch=patch)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to create product")
        return {"error": "Internal server error"}, 500

    return {"message": "Product created successfully", "product": created}, 201


@products_bp.put("/<int:product_id>")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def update_product_route(product_id: int):
    """
    Update a product.

    Requires MANAGE_PRODUCTS permission.
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        updated = products_service.update_product(product_id=product_id, patch=patch)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to update product %s", product_id)
        return {"error": "Internal server error"}, 500

    return {"message": "Product updated successfully", "product": updated}, 200


@products_bp.delete("/<int:product_id>")
@require_auth
@require_permission("DELETE_PRODUCT")
def delete_product_route(product_id: int):
    """
    Delete a product that no order references.

    Requires DELETE_PRODUCT permission.
    """
    try:
        products_service.delete_product(product_id=product_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except ConflictError as e:
        return {"error": str(e)}, 409
    except Exception:
        current_app.logger.exception("Failed to delete product %s", product_id)
        return {"error": "Internal server error"}, 500

    return {"ok": True, "message": "Product deleted successfully"}, 200
