"""
Authentication API routes.

This module provides REST endpoints for:
- Login (local username/password or federated email/provider token)
- Session refresh
- Logout
- Current session lookup
- Password change
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Request, status

from workforce_auth.api.dependencies import (
    AuthServiceDep,
    Client,
    CurrentProfile,
    CurrentSession,
    SessionToken,
    UserServiceDep,
)
from workforce_auth.core.config import settings
from workforce_auth.core.rate_limit import limiter
from workforce_auth.schemas.auth import (
    LoginRequest,
    LoginResponse,
    SessionInfo,
    SessionResponse,
)
from workforce_auth.schemas.profile import PasswordChange, ProfileResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in",
    description="""
    Authenticate and receive a session token.

    - **Local login:** `credential` is the username, `secret` the password.
    - **Federated login:** `credential` is the email address, `secret` the
      access token issued by the identity provider.

    Wrong username and wrong password produce the same 401 response.
    A verified federated identity without a profile gets 403 `NO_PROFILE`.

    **Rate Limit:** Configurable via RATE_LIMIT_LOGIN (default: 5/15minute)
    """,
)
@limiter.limit(settings.rate_limit_login)
async def login(
    request: Request,
    login_data: LoginRequest,
    auth_service: AuthServiceDep,
    client: Client,
) -> LoginResponse:
    """
    Log in with either credential kind.

    Raises:
        401: Invalid credentials
        403: No profile for the federated identity
        503: Store unavailable
    """
    result = await auth_service.login(login_data.credential, login_data.secret, client)

    issued = result.session
    expires_in = max(0, int((issued.expires_at - datetime.now(UTC)).total_seconds()))
    return LoginResponse(
        session_token=issued.token,
        expires_at=issued.expires_at,
        expires_in=expires_in,
        kind=issued.kind,
        profile=ProfileResponse.model_validate(result.profile),
    )


@router.post(
    "/refresh",
    response_model=SessionInfo,
    summary="Extend the current session",
    description="""
    Extend the current session by the configured TTL. The token stays the same.
    Expired or revoked sessions are never revived.

    **Rate Limit:** Configurable via RATE_LIMIT_SESSION_REFRESH (default: 30/hour)
    """,
)
@limiter.limit(settings.rate_limit_session_refresh)
async def refresh(
    request: Request,
    token: SessionToken,
    auth_service: AuthServiceDep,
    client: Client,
) -> SessionInfo:
    refreshed = await auth_service.refresh(token, client)
    return SessionInfo.model_validate(refreshed)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Log out",
    description="Revoke the current session. Logging out twice is not an error.",
)
async def logout(
    token: SessionToken,
    auth_service: AuthServiceDep,
    client: Client,
) -> None:
    await auth_service.logout(token, client)


@router.get(
    "/session",
    response_model=SessionResponse,
    summary="Get the current session",
)
async def get_session(
    current_session: CurrentSession,
    current_profile: CurrentProfile,
) -> SessionResponse:
    return SessionResponse(
        session=SessionInfo.model_validate(current_session),
        profile=ProfileResponse.model_validate(current_profile),
    )


@router.post(
    "/change-password",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Change own password",
    description="""
    Change the password of the current profile. Requires the current password.
    Existing sessions stay valid.

    **Rate Limit:** Configurable via RATE_LIMIT_PASSWORD_CHANGE (default: 3/hour)
    """,
)
@limiter.limit(settings.rate_limit_password_change)
async def change_password(
    request: Request,
    password_data: PasswordChange,
    current_profile: CurrentProfile,
    user_service: UserServiceDep,
    client: Client,
) -> None:
    await user_service.change_own_password(
        current_profile,
        password_data.current_password,
        password_data.new_password,
        client,
    )
