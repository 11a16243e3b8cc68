"""
Pytest fixtures for storefront backend tests.

Provides an in-memory application, per-test table cleanup, users for each
role with bearer tokens, and small catalog factories.
"""

import pytest

from storefront import create_app
from storefront.extensions import db
from storefront.models import Category, Product, ROLE_ADMIN, ROLE_MANAGER, ROLE_CUSTOMER
from storefront.services.auth_service import create_user
from storefront.services.token_service import issue_token

TEST_PASSWORD = "Passw0rd"

TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SECRET_KEY': 'test-secret',
    'JWT_SECRET': 'test-jwt-secret',
    'BCRYPT_ROUNDS': 4,
}


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Empty every table before the test, keep the schema."""
    meta = db.metadata
    for table in reversed(meta.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()

    yield db.session

    db.session.rollback()
    db.session.remove()


@pytest.fixture(scope='function')
def admin_user(db_session):
    return create_user("admin", "admin@shop.test", TEST_PASSWORD, role=ROLE_ADMIN)


@pytest.fixture(scope='function')
def manager_user(db_session):
    return create_user("manager", "manager@shop.test", TEST_PASSWORD, role=ROLE_MANAGER)


@pytest.fixture(scope='function')
def customer_user(db_session):
    return create_user("customer", "customer@shop.test", TEST_PASSWORD, role=ROLE_CUSTOMER)


@pytest.fixture(scope='function')
def other_customer(db_session):
    return create_user("shopper", "shopper@shop.test", TEST_PASSWORD, role=ROLE_CUSTOMER)


@pytest.fixture(scope='function')
def admin_headers(admin_user):
    return auth_headers(issue_token(admin_user))


@pytest.fixture(scope='function')
def manager_headers(manager_user):
    return auth_headers(issue_token(manager_user))


@pytest.fixture(scope='function')
def customer_headers(customer_user):
    return auth_headers(issue_token(customer_user))


@pytest.fixture(scope='function')
def other_customer_headers(other_customer):
    return auth_headers(issue_token(other_customer))


@pytest.fixture(scope='function')
def make_category(db_session):
    """Factory: make_category("Phones", parent=electronics)."""
    def _make(name, parent=None):
        category = Category(name=name, parent_id=parent.id if parent is not None else None)
        db_session.add(category)
        db_session.commit()
        return category
    return _make


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: make_product("Phone", 19999, stock=5, category=phones)."""
    def _make(name, price_cents, *, stock=10, category):
        product = Product(name=name, price_cents=price_cents, stock=stock, category_id=category.id)
        db_session.add(product)
        db_session.commit()
        return product
    return _make


@pytest.fixture(scope='function')
def catalog(make_category, make_product):
    """
    Electronics
      Phones
        Smartphones
      Laptops
    Books
    """
    electronics = make_category("Electronics")
    phones = make_category("Phones", parent=electronics)
    smartphones = make_category("Smartphones", parent=phones)
    laptops = make_category("Laptops", parent=electronics)
    books = make_category("Books")

    return {
        "electronics": electronics,
        "phones": phones,
        "smartphones": smartphones,
        "laptops": laptops,
        "books": books,
        "pen": make_product("Pen", 500, stock=100, category=books),
        "novel": make_product("Novel", 1500, stock=20, category=books),
        "phone": make_product("Basic Phone", 2500, stock=5, category=phones),
        "smartphone": make_product("Smartphone X", 4999, stock=3, category=smartphones),
        "laptop": make_product("Laptop Pro", 150000, stock=2, category=laptops),
    }


def login(client, email: str, password: str = TEST_PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
