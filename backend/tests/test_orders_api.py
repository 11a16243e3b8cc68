"""
Order API tests: checkout over HTTP, visibility rules and administration.
"""

import pytest

from storefront.models import Product
from storefront.services import order_service


def _checkout(client, headers, items, address=None):
    payload = {"items": items}
    if address is not None:
        payload["address"] = address
    return client.post("/api/orders", json=payload, headers=headers)


class TestCreateOrder:

    def test_checkout(self, client, customer_headers, catalog, db_session):
        resp = _checkout(
            client,
            customer_headers,
            [{"productId": catalog["pen"].id, "quantity": 2}, {"productId": catalog["novel"].id, "quantity": 1}],
            address="221B Baker Street",
        )
        assert resp.status_code == 201
        order = resp.get_json()["order"]
        assert order["total_amount_cents"] == 2 * 500 + 1500
        assert order["total_amount"] == "25.00"
        assert order["status"] == "pending"
        assert len(order["lines"]) == 2

        db_session.expire_all()
        assert db_session.get(Product, catalog["pen"].id).stock == 98

    def test_insufficient_stock(self, client, customer_headers, catalog):
        resp = _checkout(client, customer_headers, [{"productId": catalog["laptop"].id, "quantity": 3}])
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["error"] == "Insufficient stock for Laptop Pro. Available: 2"
        assert body["details"]["product_id"] == catalog["laptop"].id

    def test_unknown_product(self, client, customer_headers, db_session):
        resp = _checkout(client, customer_headers, [{"productId": 999999, "quantity": 1}])
        assert resp.status_code == 404

    def test_empty_cart(self, client, customer_headers):
        resp = _checkout(client, customer_headers, [])
        assert resp.status_code == 400

    def test_client_cannot_set_price(self, client, customer_headers, catalog):
        resp = _checkout(
            client,
            customer_headers,
            [{"productId": catalog["pen"].id, "quantity": 1, "price": 1}],
        )
        assert resp.status_code == 201
        assert resp.get_json()["order"]["total_amount_cents"] == 500


class TestOrderVisibility:

    def test_customer_sees_only_own(self, client, customer_headers, other_customer_headers, catalog):
        _checkout(client, customer_headers, [{"productId": catalog["pen"].id, "quantity": 1}])
        _checkout(client, other_customer_headers, [{"productId": catalog["pen"].id, "quantity": 1}])

        assert len(client.get("/api/orders", headers=customer_headers).get_json()) == 1
        assert len(client.get("/api/orders/mine", headers=customer_headers).get_json()) == 1

    def test_manager_sees_all(self, client, customer_headers, other_customer_headers, manager_headers, catalog):
        _checkout(client, customer_headers, [{"productId": catalog["pen"].id, "quantity": 1}])
        _checkout(client, other_customer_headers, [{"productId": catalog["pen"].id, "quantity": 1}])

        orders = client.get("/api/orders", headers=manager_headers).get_json()
        assert isinstance(orders, list)
        assert len(orders) == 2
        assert all("user" in o for o in orders)

    def test_other_customers_order_forbidden(self, client, customer_headers, other_customer_headers, catalog):
        order_id = _checkout(
            client, customer_headers, [{"productId": catalog["pen"].id, "quantity": 1}],
        ).get_json()["order"]["id"]

        assert client.get(f"/api/orders/{order_id}", headers=customer_headers).status_code == 200
        assert client.get(f"/api/orders/{order_id}", headers=other_customer_headers).status_code == 403

    def test_unknown_order(self, client, admin_headers):
        assert client.get("/api/orders/999999", headers=admin_headers).status_code == 404


class TestOrderAdministration:

    def test_manager_updates_status(self, client, customer_headers, manager_headers, catalog):
        order_id = _checkout(
            client, customer_headers, [{"productId": catalog["pen"].id, "quantity": 1}],
        ).get_json()["order"]["id"]

        resp = client.put(f"/api/orders/{order_id}", json={"status": "shipped"}, headers=manager_headers)
        assert resp.status_code == 200
        assert resp.get_json()["order"]["status"] == "shipped"

    def test_invalid_status(self, client, customer_headers, manager_headers, catalog):
        order_id = _checkout(
            client, customer_headers, [{"productId": catalog["pen"].id, "quantity": 1}],
        ).get_json()["order"]["id"]

        resp = client.put(f"/api/orders/{order_id}", json={"status": "teleported"}, headers=manager_headers)
        assert resp.status_code == 400

    def test_admin_deletes(self, client, customer_headers, admin_headers, catalog):
        order_id = _checkout(
            client, customer_headers, [{"productId": catalog["pen"].id, "quantity": 1}],
        ).get_json()["order"]["id"]

        assert client.delete(f"/api/orders/{order_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/orders/{order_id}", headers=admin_headers).status_code == 404
        assert client.delete(f"/api/orders/{order_id}", headers=admin_headers).status_code == 404


class TestOrderReadFailures:
    """Unexpected store failures on order reads answer with a JSON 500."""

    @staticmethod
    def _boom(*args, **kwargs):
        raise RuntimeError("store unavailable")

    @pytest.mark.parametrize(
        "attr,path",
        [
            ("list_orders", "/api/orders"),
            ("list_user_orders", "/api/orders/mine"),
            ("get_order_for_user", "/api/orders/1"),
        ],
    )
    def test_logged_and_json(self, client, monkeypatch, customer_headers, attr, path):
        monkeypatch.setattr(order_service, attr, self._boom)
        resp = client.get(path, headers=customer_headers)
        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Internal server error"}
