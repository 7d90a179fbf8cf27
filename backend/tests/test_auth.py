"""
Cashier authentication tests.
"""

import pytest

from cafe_pos.services import auth_service
from cafe_pos.services.auth_service import AuthError


class TestPasswordHashing:

    def test_hash_and_verify(self, app):
        hashed = auth_service.hash_password("s3cret!")
        assert hashed != "s3cret!"
        assert auth_service.verify_password("s3cret!", hashed)
        assert not auth_service.verify_password("wrong", hashed)

    def test_malformed_hash(self, app):
        assert not auth_service.verify_password("anything", "not-a-bcrypt-hash")

    def test_empty_password(self, app):
        with pytest.raises(AuthError):
            auth_service.hash_password("")


class TestAuthService:

    def test_create_cashier_normalizes_email(self, db_session):
        user = auth_service.create_cashier("Sara", "  Sara@Coffee.COM ", "pw")
        assert user.email == "sara@coffee.com"

    def test_duplicate_email(self, db_session):
        auth_service.create_cashier("Sara", "sara@coffee.com", "pw")
        with pytest.raises(AuthError):
            auth_service.create_cashier("Sara 2", "SARA@coffee.com", "pw")

    def test_non_string_credentials_fail(self, db_session):
        auth_service.create_cashier("Sara", "sara@coffee.com", "pw")
        with pytest.raises(AuthError):
            auth_service.authenticate(123, "pw")
        assert not auth_service.verify_password(123, "$2b$04$invalid")

    def test_authenticate(self, db_session):
        created = auth_service.create_cashier("Sara", "sara@coffee.com", "pw")
        assert auth_service.authenticate("sara@coffee.com", "pw").id == created.id
        with pytest.raises(AuthError):
            auth_service.authenticate("sara@coffee.com", "nope")
        with pytest.raises(AuthError):
            auth_service.authenticate("nobody@coffee.com", "pw")

    @pytest.mark.parametrize("raw", [None, "", "abc", "1.5", "0", "-3", "9" * 30])
    def test_resolve_cashier_garbage(self, db_session, raw):
        assert auth_service.resolve_cashier(raw) is None

    def test_resolve_cashier(self, cashier):
        assert auth_service.resolve_cashier(f" {cashier.id} ").id == cashier.id


class TestAuthRoutes:

    def test_seed_is_idempotent(self, client, db_session):
        first = client.post('/api/auth/seed')
        assert first.status_code == 201
        body = first.get_json()
        assert body["user"]["email"] == "cashier@coffee.com"
        assert body["login"] == {"email": "cashier@coffee.com", "password": "123456"}

        second = client.post('/api/auth/seed')
        assert second.status_code == 200
        assert second.get_json()["user"]["user_id"] == body["user"]["user_id"]

    def test_login_with_seeded_cashier(self, client, db_session):
        client.post('/api/auth/seed')

        response = client.post('/api/auth/login', json={
            "email": "cashier@coffee.com",
            "password": "123456",
        })

        assert response.status_code == 200
        user = response.get_json()["user"]
        assert "password_hash" not in user
        assert user["full_name"] == "Default Cashier"

    def test_login_wrong_password(self, client, db_session):
        client.post('/api/auth/seed')
        response = client.post('/api/auth/login', json={
            "email": "cashier@coffee.com",
            "password": "654321",
        })
        assert response.status_code == 401
        assert response.get_json()["error"] == "Invalid credentials"

    def test_login_missing_fields(self, client, db_session):
        response = client.post('/api/auth/login', json={"email": "cashier@coffee.com"})
        assert response.status_code == 400

    @pytest.mark.parametrize("payload", [
        {"email": 123, "password": "x"},
        {"email": "cashier@coffee.com", "password": 123456},
        {"email": ["cashier@coffee.com"], "password": "123456"},
        ["cashier@coffee.com", "123456"],
    ])
    def test_login_rejects_malformed_body(self, client, db_session, payload):
        client.post('/api/auth/seed')
        response = client.post('/api/auth/login', json=payload)
        assert response.status_code == 400
        assert "error" in response.get_json()
