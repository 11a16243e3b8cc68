# backend/storefront/services/products_service.py
"""
Products Service

Catalog management for products. Stock set here is an administrative
override; checkout decrements stock through order_service only.

DELETE POLICY: a product referenced by any order line cannot be deleted,
so historical orders keep their product references.
"""
from __future__ import annotations

import math

from ..extensions import db
from ..models import Product, Category, OrderLine
from ..validation import ConflictError, NotFoundError

PRODUCT_MUTABLE_FIELDS = {"name", "description", "price_cents", "stock", "image", "category_id"}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def _require_category(category_id: int) -> Category:
    category = db.session.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


def list_products(
    category_id: int | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    """
    Product listing with optional category filter and pagination.

    Args:
        category_id: only products directly in this category
        page: Page number (1-indexed). If None, returns all items.
        per_page: Items per page (caller applies defaults and caps)

    Returns:
        Dict with 'items', 'count', and pagination metadata if paginated.
    """
    base_query = db.session.query(Product)
    if category_id is not None:
        base_query = base_query.filter(Product.category_id == category_id)
    base_query = base_query.order_by(Product.created_at.desc(), Product.id.desc())

    # If no pagination requested, return all items
    if page is None:
        products = base_query.all()
        return {
            "items": [p.to_dict() for p in products],
            "count": len(products),
        }

    per_page = per_page or 10
    total = base_query.count()
    total_pages = math.ceil(total / per_page)

    products = base_query.offset((page - 1) * per_page).limit(per_page).all()

    return {
        "items": [p.to_dict() for p in products],
        "count": len(products),
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


def get_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


def create_product(*, patch: dict) -> dict:
    """
    Create product using a validated patch dict.

    Raises:
        NotFoundError: category_id does not reference a category
    """
    _require_category(patch["category_id"])

    p = Product(stock=0)
    apply_product_patch(p, patch)

    db.session.add(p)
    db.session.commit()
    return p.to_dict()


def update_product(*, product_id: int, patch: dict) -> dict:
    """
    Update product fields. Price changes affect future checkouts only;
    existing order lines keep their price snapshot.
    """
    p = get_product(product_id)

    if "category_id" in patch:
        _require_category(patch["category_id"])

    apply_product_patch(p, patch)
    db.session.commit()
    return p.to_dict()


def delete_product(*, product_id: int) -> None:
    p = get_product(product_id)

    referenced = db.session.query(OrderLine.id).filter_by(product_id=p.id).first() is not None
    if referenced:
        raise ConflictError("Product appears on existing orders and cannot be deleted")

    db.session.delete(p)
    db.session.commit()
