"""
Unit tests for exception handlers.

Tests cover:
- AppException handler response format
- WWW-Authenticate challenge on authentication failures
- Validation error handler formatting (no input echo)
- General exception handler (debug vs production)
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from fastapi import Request
from fastapi.exceptions import RequestValidationError

from workforce_auth.core.handlers import (
    app_exception_handler,
    general_exception_handler,
    validation_exception_handler,
)
from workforce_auth.exceptions import (
    InactiveAccountError,
    InvalidCredentialsError,
    NotFoundError,
    ServiceUnavailableError,
)


@pytest.fixture
def mock_request() -> MagicMock:
    """Create a mock request with request_id in state."""
    request = MagicMock(spec=Request)
    request.state.request_id = "test-request-123"
    request.client.host = "127.0.0.1"
    return request


@pytest.fixture
def mock_request_no_id() -> MagicMock:
    """Create a mock request without request_id."""
    request = MagicMock(spec=Request)
    request.state = MagicMock(spec=[])
    request.client.host = "127.0.0.1"
    return request


class TestAppExceptionHandler:
    """Tests for app_exception_handler."""

    @pytest.mark.asyncio
    async def test_envelope(self, mock_request: MagicMock) -> None:
        response = await app_exception_handler(mock_request, NotFoundError("User"))
        body = json.loads(response.body)

        assert response.status_code == 404
        assert body["error"]["code"] == "NOT_FOUND"
        assert body["meta"]["request_id"] == "test-request-123"

    @pytest.mark.asyncio
    async def test_handles_missing_request_id(self, mock_request_no_id: MagicMock) -> None:
        response = await app_exception_handler(mock_request_no_id, NotFoundError("User"))

        assert json.loads(response.body)["meta"]["request_id"] is None

    @pytest.mark.asyncio
    async def test_authentication_failure_has_challenge(
        self, mock_request: MagicMock
    ) -> None:
        response = await app_exception_handler(mock_request, InvalidCredentialsError())

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_inactive_is_indistinguishable(self, mock_request: MagicMock) -> None:
        """Inactive and wrong-credential failures render the same body."""
        inactive = await app_exception_handler(mock_request, InactiveAccountError())
        invalid = await app_exception_handler(mock_request, InvalidCredentialsError())

        assert inactive.status_code == invalid.status_code
        assert inactive.body == invalid.body

    @pytest.mark.asyncio
    async def test_service_unavailable(self, mock_request: MagicMock) -> None:
        response = await app_exception_handler(mock_request, ServiceUnavailableError())

        assert response.status_code == 503
        assert json.loads(response.body)["error"]["code"] == "SERVICE_UNAVAILABLE"


class TestValidationExceptionHandler:
    """Tests for validation_exception_handler."""

    @pytest.mark.asyncio
    async def test_formats_errors_without_input(self, mock_request: MagicMock) -> None:
        exc = RequestValidationError(
            [
                {
                    "loc": ("body", "secret"),
                    "msg": "Field required",
                    "type": "missing",
                    "input": "hunter2",
                }
            ]
        )

        response = await validation_exception_handler(mock_request, exc)
        body = json.loads(response.body)

        assert response.status_code == 422
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert body["error"]["details"] == [
            {"field": "body.secret", "message": "Field required", "type": "missing"}
        ]
        assert "hunter2" not in response.body.decode()


class TestGeneralExceptionHandler:
    """Tests for general_exception_handler."""

    @pytest.mark.asyncio
    async def test_hides_details_in_production(self, mock_request: MagicMock) -> None:
        with patch("workforce_auth.core.handlers.settings") as mock_settings:
            mock_settings.debug = False
            response = await general_exception_handler(
                mock_request, RuntimeError("db password is hunter2")
            )

        body = json.loads(response.body)
        assert response.status_code == 500
        assert body["error"]["code"] == "INTERNAL_ERROR"
        assert "hunter2" not in body["error"]["message"]

    @pytest.mark.asyncio
    async def test_shows_details_in_debug(self, mock_request: MagicMock) -> None:
        with patch("workforce_auth.core.handlers.settings") as mock_settings:
            mock_settings.debug = True
            response = await general_exception_handler(mock_request, RuntimeError("boom"))

        assert json.loads(response.body)["error"]["message"] == "boom"
