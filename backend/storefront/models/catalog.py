from __future__ import annotations

from sqlalchemy.orm import validates

from ..extensions import db
from ..text_utils import slugify, cents_to_decimal_str
from ..time_utils import to_utc_z


class Category(db.Model):
    """
    Catalog category. Categories form a tree through the nullable parent_id
    self-reference (NULL = root).

    Tree algorithms work on ids (see category_service), so no parent/children
    relationship objects are mapped here.

    INVARIANTS:
    - slug is always slugify(name); assigning name recomputes it
    - the parent chain is acyclic (enforced by category_service on write)
    """
    __tablename__ = "categories"
    __table_args__ = (
        db.UniqueConstraint("slug", name="uq_categories_slug"),
        db.CheckConstraint("parent_id IS NULL OR parent_id <> id", name="ck_categories_not_own_parent"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    slug = db.Column(db.String(140), nullable=False, index=True)
    parent_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True, index=True)

    icon = db.Column(db.String(255), nullable=True)
    image = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    @validates("name")
    def _sync_slug(self, key, value):
        self.slug = slugify(value)
        return value

    def __repr__(self) -> str:
        return f"<Category id={self.id} slug={self.slug!r} parent_id={self.parent_id}>"

    def to_crumb(self) -> dict:
        return {"id": self.id, "name": self.name, "slug": self.slug}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "parent_id": self.parent_id,
            "icon": self.icon,
            "image": self.image,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Product(db.Model):
    """
    Product master data.

    Stock is decremented only by checkout (order_service) using a
    compare-and-swap update; catalog management may set it directly.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("price_cents > 0", name="ck_products_price_positive"),
        db.CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        db.Index("ix_products_category_created", "category_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    # Authoritative storage in cents (frontend may only format for display)
    price_cents = db.Column(db.Integer, nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)

    image = db.Column(db.String(255), nullable=True)

    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False, index=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    category = db.relationship("Category", backref=db.backref("products", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price_cents": self.price_cents,
            "price": cents_to_decimal_str(self.price_cents),
            "stock": self.stock,
            "image": self.image,
            "category_id": self.category_id,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
