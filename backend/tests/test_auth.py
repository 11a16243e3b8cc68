"""
Authentication tests: registration, login, password rules and token claims.
"""

import pytest

from storefront.models import User
from storefront.services import auth_service, token_service
from storefront.services.auth_service import PasswordValidationError, validate_password_strength
from storefront.validation import ConflictError

from conftest import TEST_PASSWORD, auth_headers, login


@pytest.mark.parametrize(
    "password",
    ["Ab1", "alllower1", "ALLUPPER1", "NoDigitsHere"],
)
def test_weak_passwords_rejected(password):
    with pytest.raises(PasswordValidationError):
        validate_password_strength(password)


def test_strong_password_accepted():
    validate_password_strength("Abcde1")


class TestRegister:

    def test_register_creates_customer(self, client, db_session):
        resp = client.post("/api/auth/register", json={
            "username": "newbie",
            "email": "Newbie@Shop.Test",
            "password": TEST_PASSWORD,
        })
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["user"]["role"] == "customer"
        assert body["user"]["email"] == "newbie@shop.test"
        assert "password_hash" not in body["user"]

        claims = token_service.decode_token(body["token"])
        assert claims.user_id == body["user"]["id"]
        assert claims.role == "customer"

    def test_role_cannot_be_chosen(self, client, db_session):
        resp = client.post("/api/auth/register", json={
            "username": "sneaky",
            "email": "sneaky@shop.test",
            "password": TEST_PASSWORD,
            "role": "admin",
        })
        assert resp.status_code == 400
        assert db_session.query(User).count() == 0

    def test_weak_password(self, client, db_session):
        resp = client.post("/api/auth/register", json={
            "username": "weakling",
            "email": "weak@shop.test",
            "password": "short",
        })
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Validation failed"

    def test_duplicate_email(self, client, customer_user):
        resp = client.post("/api/auth/register", json={
            "username": "another",
            "email": "customer@shop.test",
            "password": TEST_PASSWORD,
        })
        assert resp.status_code == 409
        assert resp.get_json()["error"] == "User already exists with this email"

    def test_duplicate_username(self, db_session, customer_user):
        with pytest.raises(ConflictError, match="Username already taken"):
            auth_service.register("customer", "fresh@shop.test", TEST_PASSWORD)

    def test_password_is_hashed(self, customer_user):
        assert customer_user.password_hash != TEST_PASSWORD
        assert auth_service.verify_password(TEST_PASSWORD, customer_user.password_hash)
        assert not auth_service.verify_password("Wrong1pass", customer_user.password_hash)


class TestLogin:

    def test_login_returns_token(self, client, customer_user):
        token = login(client, "customer@shop.test")
        assert token

        resp = client.get("/api/auth/me", headers=auth_headers(token))
        assert resp.status_code == 200
        assert resp.get_json()["user"]["username"] == "customer"

    def test_login_sets_last_login(self, client, customer_user):
        login(client, "customer@shop.test")
        assert customer_user.last_login_at is not None

    def test_wrong_password(self, client, customer_user):
        resp = client.post("/api/auth/login", json={"email": "customer@shop.test", "password": "Wrong1pass"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid email or password"

    def test_unknown_email(self, client, db_session):
        resp = client.post("/api/auth/login", json={"email": "ghost@shop.test", "password": TEST_PASSWORD})
        assert resp.status_code == 401

    def test_missing_fields(self, client, db_session):
        resp = client.post("/api/auth/login", json={"email": "customer@shop.test"})
        assert resp.status_code == 400

    def test_profile(self, client, customer_user, customer_headers):
        resp = client.get("/api/users/profile", headers=customer_headers)
        assert resp.status_code == 200
        assert resp.get_json()["user"]["email"] == "customer@shop.test"
