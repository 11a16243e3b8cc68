"""
Concurrent checkout tests.

Two checkouts race for the last unit of a product against a file-backed
SQLite database (each thread has its own connection). Exactly one may win
and stock must never go negative.
"""

import os
import tempfile
import threading

import pytest

from storefront import create_app
from storefront.extensions import db
from storefront.models import Category, Product, Order
from storefront.services import order_service
from storefront.services.auth_service import create_user
from storefront.services.order_service import InsufficientStockError


@pytest.fixture
def file_app():
    fd, path = tempfile.mkstemp(suffix=".sqlite3")
    os.close(fd)

    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f'sqlite:///{path}',
        'BCRYPT_ROUNDS': 4,
    })
    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.engine.dispose()
    os.unlink(path)


def _seed(app, stock):
    with app.app_context():
        first = create_user("racer1", "racer1@shop.test", "Passw0rd")
        second = create_user("racer2", "racer2@shop.test", "Passw0rd")
        category = Category(name="Limited")
        db.session.add(category)
        db.session.flush()
        product = Product(name="Last One", price_cents=1000, stock=stock, category_id=category.id)
        db.session.add(product)
        db.session.commit()
        ids = (first.id, second.id, product.id)
        db.session.remove()
        return ids


def _race(app, user_ids, product_id, quantity):
    barrier = threading.Barrier(len(user_ids))
    results = []
    lock = threading.Lock()

    def worker(user_id):
        with app.app_context():
            barrier.wait()
            try:
                order_service.checkout(user_id, [{"productId": product_id, "quantity": quantity}])
                outcome = "ok"
            except InsufficientStockError:
                outcome = "insufficient"
            finally:
                db.session.remove()
            with lock:
                results.append(outcome)

    threads = [threading.Thread(target=worker, args=(uid,)) for uid in user_ids]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    return results


def test_last_unit_sold_once(file_app):
    first_id, second_id, product_id = _seed(file_app, stock=1)

    results = _race(file_app, [first_id, second_id], product_id, 1)

    assert sorted(results) == ["insufficient", "ok"]
    with file_app.app_context():
        assert db.session.get(Product, product_id).stock == 0
        assert db.session.query(Order).count() == 1


def test_stock_split_between_buyers(file_app):
    first_id, second_id, product_id = _seed(file_app, stock=4)

    results = _race(file_app, [first_id, second_id], product_id, 2)

    assert results == ["ok", "ok"]
    with file_app.app_context():
        assert db.session.get(Product, product_id).stock == 0
        assert db.session.query(Order).count() == 2
