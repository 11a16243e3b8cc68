from __future__ import annotations

from ..extensions import db
from ..text_utils import cents_to_decimal_str
from ..time_utils import to_utc_z

STATUS_PENDING = "pending"
STATUS_PAID = "paid"
STATUS_SHIPPED = "shipped"
STATUS_CANCELLED = "cancelled"
ORDER_STATUSES = (STATUS_PENDING, STATUS_PAID, STATUS_SHIPPED, STATUS_CANCELLED)


class Order(db.Model):
    """
    Order header created by checkout.

    Immutable after creation except for status. total_amount_cents is always
    computed server-side from the line snapshots.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.CheckConstraint(
            "status IN ('pending', 'paid', 'shipped', 'cancelled')",
            name="ck_orders_status",
        ),
        db.Index("ix_orders_user_created", "user_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    total_amount_cents = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(16), nullable=False, default=STATUS_PENDING, index=True)

    # Shipping address snapshot, free text
    address = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    user = db.relationship("User", backref=db.backref("orders", lazy=True))
    lines = db.relationship(
        "OrderLine",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLine.id",
        lazy=True,
    )

    def __repr__(self) -> str:
        return f"<Order id={self.id} user_id={self.user_id} status={self.status}>"

    def to_dict(self, include_user: bool = False) -> dict:
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "total_amount_cents": self.total_amount_cents,
            "total_amount": cents_to_decimal_str(self.total_amount_cents),
            "status": self.status,
            "address": self.address,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "lines": [line.to_dict() for line in self.lines],
        }
        if include_user and self.user is not None:
            data["user"] = self.user.to_public_dict()
        return data


class OrderLine(db.Model):
    """
    One product on an order, with the quantity and the price snapshot taken at
    checkout. Later product price changes never touch these rows.
    """
    __tablename__ = "order_lines"
    __table_args__ = (
        db.UniqueConstraint("order_id", "product_id", name="uq_order_lines_order_product"),
        db.CheckConstraint("quantity >= 1", name="ck_order_lines_quantity_positive"),
        db.CheckConstraint("price_at_purchase_cents >= 0", name="ck_order_lines_price_non_negative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    price_at_purchase_cents = db.Column(db.Integer, nullable=False)

    order = db.relationship("Order", back_populates="lines")
    product = db.relationship("Product")

    @property
    def line_total_cents(self) -> int:
        return self.price_at_purchase_cents * self.quantity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product is not None else None,
            "quantity": self.quantity,
            "price_at_purchase_cents": self.price_at_purchase_cents,
            "price_at_purchase": cents_to_decimal_str(self.price_at_purchase_cents),
            "line_total_cents": self.line_total_cents,
        }
