"""
Fixtures for HTTP-level tests.

The application is driven through httpx's ASGITransport. Services are
replaced with mocks through FastAPI dependency overrides, so these tests
exercise routing, schemas, error envelopes and middleware without a
database.
"""

from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from factories import make_session
from workforce_auth.api.dependencies import (
    get_audit_service,
    get_auth_service,
    get_current_profile,
    get_current_session,
    get_organization_service,
    get_user_service,
)
from workforce_auth.main import app


@pytest.fixture
def auth_service() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def user_service() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def organization_service() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def audit_service() -> AsyncMock:
    return AsyncMock()


@pytest_asyncio.fixture
async def async_client(
    auth_service, user_service, organization_service, audit_service
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async HTTP client with mocked services.

    Individual tests authenticate by calling ``login_as``.
    """
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    app.dependency_overrides[get_user_service] = lambda: user_service
    app.dependency_overrides[get_organization_service] = lambda: organization_service
    app.dependency_overrides[get_audit_service] = lambda: audit_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def login_as():
    """Make every authenticated dependency resolve to the given profile."""

    def _login_as(profile):
        session = make_session(profile_id=profile.id)
        app.dependency_overrides[get_current_session] = lambda: session
        app.dependency_overrides[get_current_profile] = lambda: profile
        return session

    return _login_as
