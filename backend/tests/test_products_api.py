"""
Product catalog API tests.
"""

from storefront.models import Product
from storefront.services import order_service


class TestProductReads:

    def test_list_is_public(self, client, catalog):
        resp = client.get("/api/products")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["count"] == 5
        assert "pagination" not in body

    def test_list_filtered_and_paginated(self, client, catalog):
        resp = client.get(f"/api/products?category_id={catalog['books'].id}&page=1&limit=1")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["count"] == 1
        assert body["pagination"]["total"] == 2
        assert body["pagination"]["total_pages"] == 2

    def test_limit_is_capped(self, client, catalog):
        resp = client.get("/api/products?page=1&limit=1000")
        assert resp.status_code == 200
        assert resp.get_json()["pagination"]["per_page"] == 100

    def test_bad_page(self, client, catalog):
        assert client.get("/api/products?page=0").status_code == 400
        assert client.get("/api/products?category_id=abc").status_code == 400

    def test_detail(self, client, catalog):
        resp = client.get(f"/api/products/{catalog['novel'].id}")
        assert resp.status_code == 200
        product = resp.get_json()["product"]
        assert product["price_cents"] == 1500
        assert product["price"] == "15.00"

    def test_detail_not_found(self, client, db_session):
        assert client.get("/api/products/999999").status_code == 404


class TestProductWrites:

    def test_create(self, client, admin_headers, catalog):
        resp = client.post(
            "/api/products",
            json={"name": "Atlas", "price_cents": 3999, "stock": 7, "category_id": catalog["books"].id},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        product = resp.get_json()["product"]
        assert product["name"] == "Atlas"
        assert product["stock"] == 7

    def test_create_defaults_stock_to_zero(self, client, admin_headers, catalog):
        resp = client.post(
            "/api/products",
            json={"name": "Atlas", "price_cents": 3999, "category_id": catalog["books"].id},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        assert resp.get_json()["product"]["stock"] == 0

    def test_create_validation(self, client, admin_headers, catalog):
        books_id = catalog["books"].id
        cases = [
            {"price_cents": 100, "category_id": books_id},
            {"name": "Free", "price_cents": 0, "category_id": books_id},
            {"name": "Neg", "price_cents": 100, "stock": -1, "category_id": books_id},
            {"name": "Float", "price_cents": 1.5, "category_id": books_id},
            {"name": "Extra", "price_cents": 100, "category_id": books_id, "version_id": 9},
        ]
        for payload in cases:
            resp = client.post("/api/products", json=payload, headers=admin_headers)
            assert resp.status_code == 400, payload

    def test_create_unknown_category(self, client, admin_headers, db_session):
        resp = client.post(
            "/api/products",
            json={"name": "Lost", "price_cents": 100, "category_id": 999999},
            headers=admin_headers,
        )
        assert resp.status_code == 404

    def test_update(self, client, manager_headers, catalog):
        resp = client.put(
            f"/api/products/{catalog['pen'].id}",
            json={"price_cents": 650, "stock": 42},
            headers=manager_headers,
        )
        assert resp.status_code == 200
        product = resp.get_json()["product"]
        assert product["price_cents"] == 650
        assert product["stock"] == 42

    def test_delete(self, client, admin_headers, catalog, db_session):
        pen_id = catalog["pen"].id
        resp = client.delete(f"/api/products/{pen_id}", headers=admin_headers)
        assert resp.status_code == 200
        assert db_session.get(Product, pen_id) is None

    def test_delete_ordered_product_conflicts(self, client, admin_headers, customer_user, catalog):
        pen_id = catalog["pen"].id
        order_service.checkout(customer_user.id, [{"productId": pen_id, "quantity": 1}])

        resp = client.delete(f"/api/products/{pen_id}", headers=admin_headers)
        assert resp.status_code == 409
