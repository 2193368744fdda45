"""Tests for authentication endpoints."""

from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import jwt
import pytest
from sqlalchemy import select

from app.models.token_blacklist import BlacklistedToken
from app.models.user import UserRole
from app.services.token_blacklist import TokenBlacklistError, TokenBlacklistService

TEST_PASSWORD = "testpassword123"


def _register_payload(**overrides) -> dict:
    payload = {
        "email": "new.user@example.com",
        "username": "newuser",
        "password": "s3cret-pass",
    }
    payload.update(overrides)
    return payload


class TestRegister:
    """Tests for POST /api/auth/register."""

    @pytest.mark.asyncio
    async def test_register_returns_token(self, async_client, token_issuer):
        response = await async_client.post("/api/auth/register", json=_register_payload())

        assert response.status_code == 201
        data = response.json()
        assert data["username"] == "newuser"
        assert data["email"] == "new.user@example.com"
        assert data["role"] == "Customer"
        assert data["token_type"] == "bearer"
        claims = token_issuer.verify(data["token"])
        assert claims["sub"] == str(data["user_id"])
        assert claims["role"] == "Customer"

    @pytest.mark.asyncio
    async def test_register_admin(self, async_client):
        response = await async_client.post(
            "/api/auth/register",
            json=_register_payload(role="Admin"),
        )

        assert response.status_code == 201
        assert response.json()["role"] == "Admin"

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, async_client, customer_user):
        response = await async_client.post(
            "/api/auth/register",
            json=_register_payload(email=customer_user.email),
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Email already registered"

    @pytest.mark.asyncio
    async def test_register_duplicate_username(self, async_client, customer_user):
        response = await async_client.post(
            "/api/auth/register",
            json=_register_payload(username=customer_user.username),
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Username already taken"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"email": "not-an-email"},
            {"password": "123"},
            {"username": "ab"},
            {"role": "Superuser"},
        ],
    )
    async def test_register_validation(self, async_client, overrides):
        response = await async_client.post("/api/auth/register", json=_register_payload(**overrides))
        assert response.status_code == 422


class TestLogin:
    """Tests for POST /api/auth/login."""

    @pytest.mark.asyncio
    async def test_login_success(self, async_client, customer_user, token_issuer):
        response = await async_client.post(
            "/api/auth/login",
            json={"username": customer_user.username, "password": TEST_PASSWORD},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == customer_user.id
        assert token_issuer.verify(data["token"])["username"] == customer_user.username

    @pytest.mark.asyncio
    async def test_login_sets_last_login(self, async_client, customer_user, db_session):
        assert customer_user.last_login_at is None

        await async_client.post(
            "/api/auth/login",
            json={"username": customer_user.username, "password": TEST_PASSWORD},
        )

        await db_session.refresh(customer_user)
        assert customer_user.last_login_at is not None

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, async_client, customer_user):
        response = await async_client.post(
            "/api/auth/login",
            json={"username": customer_user.username, "password": "wrong-password"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid username or password"

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, async_client):
        response = await async_client.post(
            "/api/auth/login",
            json={"username": "ghost", "password": "whatever"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid username or password"

    @pytest.mark.asyncio
    async def test_each_login_issues_new_token(self, async_client, customer_user, token_issuer):
        credentials = {"username": customer_user.username, "password": TEST_PASSWORD}
        first = (await async_client.post("/api/auth/login", json=credentials)).json()["token"]
        second = (await async_client.post("/api/auth/login", json=credentials)).json()["token"]

        assert token_issuer.verify(first)["jti"] != token_issuer.verify(second)["jti"]


class TestLogout:
    """Tests for POST /api/auth/logout."""

    @pytest.mark.asyncio
    async def test_logout_blacklists_token(
        self, async_client, db_session, customer_user, customer_headers
    ):
        response = await async_client.post("/api/auth/logout", headers=customer_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Logged out successfully"

        result = await db_session.execute(select(BlacklistedToken))
        entry = result.scalar_one()
        assert entry.user_id == customer_user.id
        assert entry.reason == "User logout"

    @pytest.mark.asyncio
    async def test_token_unusable_after_logout(self, async_client, customer_headers):
        await async_client.post("/api/auth/logout", headers=customer_headers)

        for path in ("/api/protected/data", "/api/auth/profile", "/api/auth/token-status"):
            response = await async_client.get(path, headers=customer_headers)
            assert response.status_code == 401
            assert response.text == "Token has been invalidated"

    @pytest.mark.asyncio
    async def test_logout_twice_rejected_by_gate(self, async_client, customer_headers):
        await async_client.post("/api/auth/logout", headers=customer_headers)

        response = await async_client.post("/api/auth/logout", headers=customer_headers)

        assert response.status_code == 401
        assert response.text == "Token has been invalidated"

    @pytest.mark.asyncio
    async def test_other_sessions_stay_valid(
        self, async_client, customer_user, customer_headers, token_issuer, bearer
    ):
        other_headers = bearer(token_issuer.issue(customer_user).token)

        await async_client.post("/api/auth/logout", headers=customer_headers)

        response = await async_client.get("/api/protected/data", headers=other_headers)
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_logout_requires_token(self, async_client):
        response = await async_client.post("/api/auth/logout")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_logout_store_failure(self, async_client, customer_headers):
        with patch.object(
            TokenBlacklistService,
            "revoke",
            AsyncMock(side_effect=TokenBlacklistError("Failed to blacklist token")),
        ):
            response = await async_client.post("/api/auth/logout", headers=customer_headers)

        assert response.status_code == 500
        assert response.json()["detail"] == "An error occurred during logout"


class TestTokenStatus:
    """Tests for GET /api/auth/token-status."""

    @pytest.mark.asyncio
    async def test_fresh_token(self, async_client, customer_user, customer_headers):
        response = await async_client.get("/api/auth/token-status", headers=customer_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["is_valid"] is True
        assert data["is_blacklisted"] is False
        assert data["user_id"] == str(customer_user.id)
        assert data["username"] == customer_user.username
        assert data["role"] == "Customer"
        assert "checked_at" in data

    @pytest.mark.asyncio
    async def test_expired_token_rejected(self, async_client, customer_user, bearer):
        from app.main import app

        config = app.state.token_issuer.config
        past = datetime.now(UTC) - timedelta(hours=25)
        token = jwt.encode(
            {
                "jti": "expired",
                "sub": str(customer_user.id),
                "iat": past,
                "exp": past + timedelta(hours=24),
                "iss": config.issuer,
                "aud": config.audience,
            },
            config.secret_key,
            algorithm=config.algorithm,
        )

        response = await async_client.get("/api/auth/token-status", headers=bearer(token))

        assert response.status_code == 401
        assert response.json()["detail"] == "Token has expired"


class TestProfile:
    """Tests for GET /api/auth/profile."""

    @pytest.mark.asyncio
    async def test_profile(self, async_client, admin_user, admin_headers):
        response = await async_client.get("/api/auth/profile", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == admin_user.id
        assert data["username"] == "admin"
        assert data["role"] == UserRole.ADMIN.value
        assert "password_hash" not in data

    @pytest.mark.asyncio
    async def test_profile_unknown_user(self, async_client, db_engine, token_issuer, bearer):
        ghost = SimpleNamespace(
            id=9999, username="ghost", email="ghost@example.com", role=UserRole.CUSTOMER
        )

        response = await async_client.get(
            "/api/auth/profile",
            headers=bearer(token_issuer.issue(ghost).token),
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_profile_requires_token(self, async_client):
        response = await async_client.get("/api/auth/profile")
        assert response.status_code == 401
