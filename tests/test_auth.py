"""Tests for bearer authentication, the error envelopes and admin seeding."""

import jwt
import pytest
from fastapi.testclient import TestClient

from packwell.core.config import Settings, settings
from packwell.core.seed import admin_id_for, ensure_admin
from packwell.database import product_db, user_db
from packwell.errors import AuthenticationError
from packwell.main import app
from packwell.models.user import UserRole
from packwell.security.auth_middleware import decode_token, issue_token


class TestBearerToken:
    def test_missing_token(self, client):
        response = client.get("/api/users/profile")
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Access denied. No valid token provided."}

    def test_wrong_scheme(self, client, customer):
        response = client.get("/api/users/profile", headers={"Authorization": f"Token {issue_token(customer)}"})
        assert response.status_code == 401

    def test_malformed_token(self, client):
        response = client.get("/api/users/profile", headers={"Authorization": "Bearer not.a.jwt"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token."

    def test_expired_token(self, client, customer):
        token = issue_token(customer, expires_minutes=-5)
        response = client.get("/api/users/profile", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["message"] == "Token expired."

    def test_wrong_secret(self, client, customer):
        token = jwt.encode({"sub": customer.id, "exp": 4102444800}, "someone-elses-secret", algorithm="HS256")
        response = client.get("/api/users/profile", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_bad_token_rejected_on_public_route(self, client):
        response = client.get("/api/products", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401

    def test_public_route_without_token(self, client):
        assert client.get("/api/products").status_code == 200

    def test_unknown_user(self, client, customer):
        token = issue_token(customer)
        user_db.reset()
        response = client.get("/api/users/profile", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["message"] == "Access denied. User not found or inactive."

    def test_deactivated_user(self, client, customer, customer_headers):
        user_db.update_user(customer.id, is_active=False)
        assert client.get("/api/cart", headers=customer_headers).status_code == 401

    def test_admin_route_for_customer(self, client, customer_headers):
        response = client.get("/api/admin/dashboard", headers=customer_headers)
        assert response.status_code == 403
        assert response.json()["message"] == "Access denied. Admin privileges required."

    def test_role_comes_from_store(self, client, customer, customer_headers):
        user_db.update_user(customer.id, role=UserRole.ADMIN)
        assert client.get("/api/admin/dashboard", headers=customer_headers).status_code == 200

    def test_decode_round_trip(self, admin):
        principal = decode_token(issue_token(admin))
        assert principal.user_id == admin.id
        assert principal.is_admin

    def test_decode_requires_subject(self):
        token = jwt.encode({"exp": 4102444800}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
        with pytest.raises(AuthenticationError):
            decode_token(token)


class TestErrorEnvelopes:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy", "service": "packwell-store"}

    def test_index(self, client):
        assert client.get("/").json()["endpoints"]["orders"] == "/api/orders"

    def test_unknown_route(self, client):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_unexpected_error_in_development(self, monkeypatch):
        def broken(**filters):
            raise RuntimeError("index corrupted")

        monkeypatch.setattr(product_db, "search_products", broken)
        monkeypatch.setattr(settings, "environment", "development")
        response = TestClient(app, raise_server_exceptions=False).get("/api/products")
        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Something went wrong",
            "error": "index corrupted",
        }

    def test_redacted_by_default(self, monkeypatch):
        monkeypatch.delenv("PACKWELL_ENVIRONMENT", raising=False)
        defaults = Settings(_env_file=None)
        assert defaults.environment == "production"
        assert not defaults.is_development

    def test_unexpected_error_is_redacted_in_production(self, monkeypatch):
        def broken(**filters):
            raise RuntimeError("index corrupted")

        monkeypatch.setattr(product_db, "search_products", broken)
        monkeypatch.setattr(settings, "environment", "production")
        response = TestClient(app, raise_server_exceptions=False).get("/api/products")
        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"


class TestAdminSeeding:
    def test_creates_admin_with_stable_id(self):
        admin = ensure_admin("Owner@Packwell.in", "Owner")
        assert admin.role == UserRole.ADMIN
        assert admin.id == admin_id_for("owner@packwell.in")

    def test_token_survives_reseeding(self, client):
        token = issue_token(ensure_admin("owner@packwell.in", "Owner"))
        user_db.reset()
        ensure_admin("owner@packwell.in", "Owner")

        response = client.get("/api/admin/dashboard", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200

    def test_promotes_existing_account(self, customer):
        user_db.update_user(customer.id, is_active=False)
        admin = ensure_admin(customer.email, "ignored")
        assert admin.id == customer.id
        assert admin.role == UserRole.ADMIN
        assert admin.is_active
