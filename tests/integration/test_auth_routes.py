"""
Integration tests for authentication routes.

Tests cover:
- Login (local and federated) and its uniform failure responses
- Session refresh and logout
- Current session lookup
- Password change
"""

import pytest
from httpx import AsyncClient

from factories import AUTH_HEADERS, make_profile, make_session
from workforce_auth.exceptions import (
    InactiveAccountError,
    InvalidCredentialsError,
    InvalidInputError,
    NoProfileError,
    ServiceUnavailableError,
    SessionNotFoundError,
)
from workforce_auth.models.enums import SessionKind
from workforce_auth.services.auth_service import LoginResult
from workforce_auth.services.session_service import IssuedSession


# ============================================================================
# Login Tests
# ============================================================================
class TestLogin:
    """Test login endpoint."""

    @pytest.mark.asyncio
    async def test_login_success(self, async_client: AsyncClient, auth_service):
        profile = make_profile()
        auth_service.login.return_value = LoginResult(
            session=IssuedSession(
                token="wfs_abc", session=make_session(profile_id=profile.id)
            ),
            profile=profile,
        )

        response = await async_client.post(
            "/api/auth/login", json={"credential": "alice", "secret": "S3cure!pass"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["session_token"] == "wfs_abc"
        assert data["token_type"] == "bearer"
        assert data["kind"] == "local"
        assert 0 < data["expires_in"] <= 3600
        assert data["profile"]["username"] == "alice"
        assert "password" not in str(data)
        assert response.headers["Cache-Control"] == "no-store"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error", [InvalidCredentialsError(), InactiveAccountError()]
    )
    async def test_failures_are_indistinguishable(
        self, async_client: AsyncClient, auth_service, error
    ):
        """Unknown user, wrong password and inactive profile look identical."""
        auth_service.login.side_effect = error

        response = await async_client.post(
            "/api/auth/login", json={"credential": "alice", "secret": "nope"}
        )

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["error"] == {
            "code": "INVALID_CREDENTIALS",
            "message": "Invalid credentials",
            "details": {},
        }

    @pytest.mark.asyncio
    async def test_federated_without_profile(self, async_client: AsyncClient, auth_service):
        auth_service.login.side_effect = NoProfileError()

        response = await async_client.post(
            "/api/auth/login",
            json={"credential": "bob@acme.io", "secret": "provider-token"},
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "NO_PROFILE"

    @pytest.mark.asyncio
    async def test_store_unavailable(self, async_client: AsyncClient, auth_service):
        auth_service.login.side_effect = ServiceUnavailableError()

        response = await async_client.post(
            "/api/auth/login", json={"credential": "alice", "secret": "S3cure!pass"}
        )

        assert response.status_code == 503

    @pytest.mark.asyncio
    async def test_missing_fields(self, async_client: AsyncClient, auth_service):
        response = await async_client.post("/api/auth/login", json={"credential": "alice"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        auth_service.login.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, async_client: AsyncClient, auth_service):
        auth_service.login.side_effect = InvalidCredentialsError()

        response = await async_client.post(
            "/api/auth/login",
            json={"credential": "alice", "secret": "nope"},
            headers={"X-Request-ID": "trace-0001"},
        )

        assert response.headers["X-Request-ID"] == "trace-0001"
        assert response.json()["meta"]["request_id"] == "trace-0001"


# ============================================================================
# Session Lifecycle Tests
# ============================================================================
class TestSessionLifecycle:
    """Test refresh, logout and session lookup."""

    @pytest.mark.asyncio
    async def test_refresh(self, async_client: AsyncClient, auth_service):
        refreshed = make_session(kind=SessionKind.FEDERATED)
        auth_service.refresh.return_value = refreshed

        response = await async_client.post("/api/auth/refresh", headers=AUTH_HEADERS)

        assert response.status_code == 200
        assert response.json()["kind"] == "federated"
        assert auth_service.refresh.call_args.args[0] == "wfs_test-session-token"

    @pytest.mark.asyncio
    async def test_refresh_rejected(self, async_client: AsyncClient, auth_service):
        auth_service.refresh.side_effect = SessionNotFoundError()

        response = await async_client.post("/api/auth/refresh", headers=AUTH_HEADERS)

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "SESSION_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_logout(self, async_client: AsyncClient, auth_service):
        response = await async_client.post("/api/auth/logout", headers=AUTH_HEADERS)

        assert response.status_code == 204
        auth_service.logout.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_token(self, async_client: AsyncClient, auth_service):
        response = await async_client.post("/api/auth/logout")

        assert response.status_code == 401
        auth_service.logout.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_current_session(self, async_client: AsyncClient, login_as):
        profile = make_profile(username="carol")
        login_as(profile)

        response = await async_client.get("/api/auth/session", headers=AUTH_HEADERS)

        assert response.status_code == 200
        data = response.json()
        assert data["profile"]["username"] == "carol"
        assert data["session"]["kind"] == "local"
        assert "token_hash" not in data["session"]


# ============================================================================
# Password Change Tests
# ============================================================================
class TestChangePassword:
    """Test password change endpoint."""

    @pytest.mark.asyncio
    async def test_change_password(self, async_client: AsyncClient, user_service, login_as):
        profile = make_profile()
        login_as(profile)

        response = await async_client.post(
            "/api/auth/change-password",
            headers=AUTH_HEADERS,
            json={"current_password": "S3cure!pass", "new_password": "N3w!Secret"},
        )

        assert response.status_code == 204
        args = user_service.change_own_password.call_args.args
        assert args[:3] == (profile, "S3cure!pass", "N3w!Secret")

    @pytest.mark.asyncio
    async def test_wrong_current_password(
        self, async_client: AsyncClient, user_service, login_as
    ):
        login_as(make_profile())
        user_service.change_own_password.side_effect = InvalidCredentialsError()

        response = await async_client.post(
            "/api/auth/change-password",
            headers=AUTH_HEADERS,
            json={"current_password": "Wrong!pass1", "new_password": "N3w!Secret"},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_weak_new_password_rejected_by_schema(
        self, async_client: AsyncClient, user_service, login_as
    ):
        login_as(make_profile())

        response = await async_client.post(
            "/api/auth/change-password",
            headers=AUTH_HEADERS,
            json={"current_password": "S3cure!pass", "new_password": "NoDigits!!"},
        )

        assert response.status_code == 422
        assert "NoDigits!!" not in response.text
        user_service.change_own_password.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_same_password_rejected_by_service(
        self, async_client: AsyncClient, user_service, login_as
    ):
        login_as(make_profile())
        user_service.change_own_password.side_effect = InvalidInputError(
            field="new_password",
            message="New password must differ from the current password",
        )

        response = await async_client.post(
            "/api/auth/change-password",
            headers=AUTH_HEADERS,
            json={"current_password": "S3cure!pass", "new_password": "S3cure!pass"},
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_INPUT"
