# Overview: Flask API routes for the category tree; parses input and returns JSON responses.

"""
Category routes.

Public reads (tree, detail with breadcrumbs, products in subtree); writes
require MANAGE_CATEGORIES, deletes require DELETE_CATEGORY.
"""

from flask import Blueprint, request, jsonify, current_app

from ..services import category_service
from ..models import Category
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    parse_pagination,
    parse_price_cents,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from ..decorators import require_auth, require_permission

CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields={"name", "parent_id", "icon", "image"},
    required_on_create={"name"},
)

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


def _domain_error_response(e: Exception):
    if isinstance(e, ValidationError):
        return {"error": str(e)}, 400
    if isinstance(e, NotFoundError):
        return {"error": str(e)}, 404
    if isinstance(e, ConflictError):
        return {"error": str(e)}, 409
    raise e


@categories_bp.post("")
@require_auth
@require_permission("MANAGE_CATEGORIES")
def create_category_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=False)
        category = category_service.create_category(patch=patch)
    except (ValidationError, NotFoundError, ConflictError) as e:
        return _domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create category")
        return {"error": "Internal server error"}, 500

    return {"category": category.to_dict()}, 201


@categories_bp.put("/<int:category_id>")
@require_auth
@require_permission("MANAGE_CATEGORIES")
def update_category_route(category_id: int):
    """Rename (slug follows) or re-parent a category. Cycles are rejected with 400."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=True)
        category = category_service.update_category(category_id=category_id, patch=patch)
    except (ValidationError, NotFoundError, ConflictError) as e:
        return _domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update category %s", category_id)
        return {"error": "Internal server error"}, 500

    return {"category": category.to_dict()}, 200


@categories_bp.delete("/<int:category_id>")
@require_auth
@require_permission("DELETE_CATEGORY")
def delete_category_route(category_id: int):
    try:
        category_service.delete_category(category_id=category_id)
    except (NotFoundError, ConflictError) as e:
        return _domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete category %s", category_id)
        return {"error": "Internal server error"}, 500

    return {"ok": True, "message": "Category deleted successfully"}, 200


@categories_bp.get("/tree")
def category_tree_route():
    """
    Nested category tree as a JSON array of root nodes.

    Query params:
    - root: slug or id (optional) - return only that subtree
    """
    root = request.args.get("root") or None
    try:
        tree = category_service.resolve_tree(root)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to build category tree (root=%s)", root)
        return {"error": "Internal server error"}, 500
    return jsonify(tree), 200


@categories_bp.get("/<slug>")
def category_detail_route(slug: str):
    try:
        return category_service.get_category_detail(slug), 200
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to load category %s", slug)
        return {"error": "Internal server error"}, 500


@categories_bp.get("/<slug>/products")
def category_products_route(slug: str):
    """
    Products in this category and every subcategory, newest first.

    Query params:
    - page, limit: pagination (limit capped at MAX_PAGE_SIZE)
    - minPrice, maxPrice: inclusive bounds in currency units (e.g. 10, 49.99)
    - search: case-insensitive substring of the product name
    """
    args = request.args
    try:
        page, limit = parse_pagination(
            args.get("page"),
            args.get("limit"),
            default_limit=current_app.config["DEFAULT_PAGE_SIZE"],
            max_limit=current_app.config["MAX_PAGE_SIZE"],
        )
        min_price = args.get("minPrice")
        max_price = args.get("maxPrice")
        result = category_service.products_in_subtree(
            slug,
            min_price_cents=parse_price_cents(min_price, "minPrice") if min_price else None,
            max_price_cents=parse_price_cents(max_price, "maxPrice") if max_price else None,
            search=args.get("search") or None,
            page=page,
            limit=limit,
        )
    except (ValidationError, NotFoundError) as e:
        return _domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list products for category %s", slug)
        return {"error": "Internal server error"}, 500

    return result, 200
