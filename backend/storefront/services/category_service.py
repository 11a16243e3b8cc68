# Overview: Service-layer operations for the category tree; encapsulates business logic and database work.

"""
Category Resolver

Categories are stored as an arena of rows keyed by id with a nullable
parent_id. Every algorithm here works through id lookups (no live
parent/children object graph) and iterates instead of recursing, so deep
trees cannot exhaust the call stack.

Acyclicity is enforced on write (update_category); the read paths still keep
a visited set so a corrupted table cannot make them loop.

DELETE POLICY: restrict. A category that still has children or products
cannot be deleted (ConflictError).
"""

from __future__ import annotations

import math

from ..extensions import db
from ..models import Category, Product
from ..text_utils import slugify
from ..validation import ValidationError, ConflictError, NotFoundError

CATEGORY_MUTABLE_FIELDS = {"name", "parent_id", "icon", "image"}


def _lookup(slug_or_id) -> Category | None:
    """Resolve a category by integer id, slug, or numeric string (slug wins)."""
    if isinstance(slug_or_id, int) and not isinstance(slug_or_id, bool):
        return db.session.get(Category, slug_or_id)
    value = str(slug_or_id).strip()
    category = db.session.query(Category).filter_by(slug=value).first()
    if category is None and value.isdigit():
        category = db.session.get(Category, int(value))
    return category


def get_category(slug_or_id) -> Category:
    category = _lookup(slug_or_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


def _require_parent(parent_id: int | None) -> None:
    if parent_id is not None and db.session.get(Category, parent_id) is None:
        raise NotFoundError("Parent category not found")


def _require_unique_slug(slug: str, exclude_id: int | None = None) -> None:
    if not slug:
        raise ValidationError("name must contain at least one letter or digit")
    query = db.session.query(Category.id).filter(Category.slug == slug)
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    if query.first() is not None:
        raise ConflictError(f"A category with slug '{slug}' already exists")


def descendant_ids(category_id: int) -> set[int]:
    """
    Descendant closure: the category id plus every id reachable through child
    links. Breadth-first, one IN query per tree level.
    """
    if db.session.get(Category, category_id) is None:
        raise NotFoundError("Category not found")

    closure = {category_id}
    frontier = [category_id]
    while frontier:
        rows = (
            db.session.query(Category.id)
            .filter(Category.parent_id.in_(frontier))
            .all()
        )
        frontier = [row.id for row in rows if row.id not in closure]
        closure.update(frontier)
    return closure


def breadcrumb(slug_or_id) -> list[dict]:
    """Ordered root -> self path of {id, name, slug}."""
    category = get_category(slug_or_id)

    trail = []
    seen = set()
    current = category
    while current is not None and current.id not in seen:
        seen.add(current.id)
        trail.append(current.to_crumb())
        if current.parent_id is None:
            break
        current = db.session.get(Category, current.parent_id)

    trail.reverse()
    return trail


def resolve_tree(root=None) -> list[dict]:
    """
    Nested category tree, however deep the stored tree is.

    Without `root`, returns every root category (parent_id IS NULL) with its
    full subtree. With `root` (slug or id), returns a one-element list holding
    that category's subtree.
    """
    categories = db.session.query(Category).order_by(Category.name.asc(), Category.id.asc()).all()

    nodes = {}
    for category in categories:
        node = category.to_dict()
        node["children"] = []
        nodes[category.id] = node

    roots = []
    for category in categories:
        parent = nodes.get(category.parent_id) if category.parent_id is not None else None
        if parent is None:
            roots.append(nodes[category.id])
        else:
            parent["children"].append(nodes[category.id])

    if root is None:
        return [node for node in roots if node["parent_id"] is None]

    target = get_category(root)
    return [nodes[target.id]]


def get_category_detail(slug_or_id) -> dict:
    category = get_category(slug_or_id)
    children = (
        db.session.query(Category)
        .filter_by(parent_id=category.id)
        .order_by(Category.name.asc())
        .all()
    )
    return {
        "category": category.to_dict(),
        "breadcrumbs": breadcrumb(category.id),
        "children": [child.to_dict() for child in children],
    }


def products_in_subtree(
    slug: str,
    *,
    min_price_cents: int | None = None,
    max_price_cents: int | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> dict:
    """
    Products in a category or any of its descendants.

    Filters: inclusive price window (cents), case-insensitive substring match
    on name. Ordered newest first and paginated.
    """
    if page < 1 or limit < 1:
        raise ValidationError("page and limit must be >= 1")
    if (
        min_price_cents is not None
        and max_price_cents is not None
        and min_price_cents > max_price_cents
    ):
        raise ValidationError("minPrice cannot be greater than maxPrice")

    category = get_category(slug)
    ids = descendant_ids(category.id)

    query = db.session.query(Product).filter(Product.category_id.in_(ids))
    if min_price_cents is not None:
        query = query.filter(Product.price_cents >= min_price_cents)
    if max_price_cents is not None:
        query = query.filter(Product.price_cents <= max_price_cents)
    if search:
        query = query.filter(Product.name.icontains(search.strip(), autoescape=True))

    total = query.count()
    total_pages = math.ceil(total / limit)

    products = (
        query.order_by(Product.created_at.desc(), Product.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "category": category.to_crumb(),
        "items": [p.to_dict() for p in products],
        "count": len(products),
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


def create_category(*, patch: dict) -> Category:
    """
    Create a category from a validated patch (name, parent_id, icon, image).

    Raises:
        ValidationError: name yields an empty slug
        NotFoundError: parent_id does not exist
        ConflictError: slug already taken
    """
    name = patch.get("name")
    if not name:
        raise ValidationError("name is required")

    _require_unique_slug(slugify(name))
    _require_parent(patch.get("parent_id"))

    category = Category()
    for k, v in patch.items():
        if k in CATEGORY_MUTABLE_FIELDS:
            setattr(category, k, v)

    db.session.add(category)
    db.session.commit()
    return category


def update_category(*, category_id: int, patch: dict) -> Category:
    """
    Update a category. A new name recomputes the slug; a new parent may not
    be the category itself or any of its descendants.
    """
    category = db.session.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category not found")

    if "name" in patch:
        _require_unique_slug(slugify(patch["name"]), exclude_id=category.id)

    if "parent_id" in patch and patch["parent_id"] is not None:
        new_parent_id = patch["parent_id"]
        _require_parent(new_parent_id)
        if new_parent_id in descendant_ids(category.id):
            raise ValidationError("A category cannot be moved under itself or one of its descendants")

    for k, v in patch.items():
        if k in CATEGORY_MUTABLE_FIELDS:
            setattr(category, k, v)

    db.session.commit()
    return category


def delete_category(*, category_id: int) -> None:
    category = db.session.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category not found")

    has_children = db.session.query(Category.id).filter_by(parent_id=category.id).first() is not None
    if has_children:
        raise ConflictError("Category has subcategories; move or delete them first")

    has_products = db.session.query(Product.id).filter_by(category_id=category.id).first() is not None
    if has_products:
        raise ConflictError("Category has products; move or delete them first")

    db.session.delete(category)
    db.session.commit()
