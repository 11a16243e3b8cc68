"""
Order Service - transactional checkout and order administration.

Checkout writes the order header, its lines and the stock decrements as one
unit of work: either everything commits or the session is rolled back and
nothing is persisted.

CONCURRENCY: two checkouts racing for the last unit must not both succeed.
- SQLite: BEGIN IMMEDIATE takes the write lock before stock is read
- Other databases: product rows are read with SELECT ... FOR UPDATE
- Everywhere: stock is decremented with a compare-and-swap UPDATE
  (stock >= quantity) whose affected-row count is verified
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from ..extensions import db
from ..models import Order, OrderLine, Product, User, ORDER_STATUSES, STATUS_PENDING
from ..permissions import is_allowed
from ..validation import ValidationError, ConflictError, NotFoundError, ForbiddenError, coerce_int
from .concurrency import lock_for_update, begin_write_transaction, run_with_retry


class InsufficientStockError(ConflictError):
    """Raised when a cart line asks for more units than are in stock."""
    def __init__(self, product_id: int, product_name: str, requested: int, available: int):
        super().__init__(f"Insufficient stock for {product_name}. Available: {available}")
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available

    @property
    def details(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "requested_quantity": self.requested,
            "available": self.available,
        }


@dataclass
class CartLine:
    product_id: int
    quantity: int


def normalize_cart(items) -> list[CartLine]:
    """
    Validate raw cart items and merge repeated products.

    Accepts productId or product_id keys. Order of first appearance is kept.
    """
    if not isinstance(items, list) or not items:
        raise ValidationError("Order must contain at least one item")

    merged: dict[int, int] = {}
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationError(f"items[{index}] must be an object")

        raw_product_id = item.get("productId", item.get("product_id"))
        if raw_product_id is None:
            raise ValidationError(f"items[{index}].productId is required")
        if "quantity" not in item:
            raise ValidationError(f"items[{index}].quantity is required")

        product_id = coerce_int(raw_product_id, f"items[{index}].productId")
        quantity = coerce_int(item["quantity"], f"items[{index}].quantity")
        if quantity < 1:
            raise ValidationError(f"items[{index}].quantity must be >= 1")

        merged[product_id] = merged.get(product_id, 0) + quantity

    return [CartLine(product_id=pid, quantity=qty) for pid, qty in merged.items()]


def _decrement_stock(product_id: int, quantity: int) -> bool:
    """Compare-and-swap decrement. Returns False when stock was too low."""
    updated = (
        db.session.query(Product)
        .filter(Product.id == product_id, Product.stock >= quantity)
        .update(
            {
                Product.stock: Product.stock - quantity,
                Product.version_id: Product.version_id + 1,
            },
            synchronize_session=False,
        )
    )
    return updated == 1


def _checkout_locked(user_id: int, cart: list[CartLine], address: str | None) -> Order:
    products: dict[int, Product] = {}
    for line in cart:
        product = lock_for_update(db.session.query(Product).filter_by(id=line.product_id)).first()
        if product is None:
            raise NotFoundError(f"Product with ID {line.product_id} not found")
        if line.quantity > product.stock:
            raise InsufficientStockError(product.id, product.name, line.quantity, product.stock)
        products[line.product_id] = product

    total_amount_cents = sum(products[line.product_id].price_cents * line.quantity for line in cart)

    order = Order(
        user_id=user_id,
        total_amount_cents=total_amount_cents,
        status=STATUS_PENDING,
        address=address,
    )
    for line in cart:
        order.lines.append(OrderLine(
            product_id=line.product_id,
            quantity=line.quantity,
            price_at_purchase_cents=products[line.product_id].price_cents,
        ))

    db.session.add(order)
    db.session.flush()  # order and lines are written before stock moves

    for line in cart:
        if not _decrement_stock(line.product_id, line.quantity):
            product = products[line.product_id]
            db.session.refresh(product)
            raise InsufficientStockError(product.id, product.name, line.quantity, product.stock)

    return order


def checkout(user_id: int, items, address: str | None = None) -> Order:
    """
    Turn a cart into a pending order, atomically.

    Raises:
        ValidationError: empty or malformed cart, bad address
        NotFoundError: unknown user or product
        InsufficientStockError: a line exceeds available stock
    """
    cart = normalize_cart(items)
    if address is not None:
        if not isinstance(address, str):
            raise ValidationError("address must be a string")
        address = address.strip() or None
        if address is not None and len(address) > 500:
            raise ValidationError("address exceeds max length 500")

    def _op():
        try:
            begin_write_transaction()
            if db.session.get(User, user_id) is None:
                raise NotFoundError("User not found")
            order = _checkout_locked(user_id, cart, address)
            db.session.commit()
            return order
        except Exception:
            db.session.rollback()
            raise

    order = run_with_retry(_op)

    current_app.logger.info(
        "Order created: order_id=%s user_id=%s total_cents=%s",
        order.id, user_id, order.total_amount_cents,
    )
    return order


def _query_orders():
    return db.session.query(Order).order_by(Order.created_at.desc(), Order.id.desc())


def list_orders(user: User) -> list[Order]:
    """Privileged roles see every order; everyone else sees their own."""
    if is_allowed(user.role, "VIEW_ALL_ORDERS"):
        return _query_orders().all()
    return list_user_orders(user.id)


def list_user_orders(user_id: int) -> list[Order]:
    return _query_orders().filter(Order.user_id == user_id).all()


def get_order(order_id: int) -> Order:
    order = db.session.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order not found")
    return order


def get_order_for_user(order_id: int, user: User) -> Order:
    order = get_order(order_id)
    if order.user_id != user.id and not is_allowed(user.role, "VIEW_ALL_ORDERS"):
        raise ForbiddenError("Access denied")
    return order


def set_status(order_id: int, status) -> Order:
    """
    Change an order's status. Any status may move to any other; only the
    value itself is validated.
    """
    if status not in ORDER_STATUSES:
        raise ValidationError("Invalid order status")

    def _op():
        order = lock_for_update(db.session.query(Order).filter_by(id=order_id)).first()
        if order is None:
            raise NotFoundError("Order not found")
        previous = order.status
        order.status = status
        db.session.commit()
        return order, previous

    order, previous = run_with_retry(_op)

    current_app.logger.info("Order status changed: order_id=%s %s -> %s", order.id, previous, status)
    return order


def delete_order(order_id: int) -> None:
    """Delete an order and its lines. Decremented stock is not restored."""
    def _op():
        order = get_order(order_id)
        db.session.delete(order)
        db.session.commit()

    run_with_retry(_op)

    current_app.logger.info("Order deleted: order_id=%s", order_id)
