"""
FastAPI dependencies for authentication and authorization.

This module provides:
- Session token extraction from the Authorization header
- Current session and current profile resolution
- Client metadata for audit records
- Service construction bound to the request's database session
"""

import logging
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from workforce_auth.core.database import get_db
from workforce_auth.exceptions import SessionNotFoundError
from workforce_auth.models.profile import Profile
from workforce_auth.models.session import AuthSession
from workforce_auth.services import (
    AuditService,
    AuthService,
    ClientMetadata,
    CredentialStore,
    OrganizationService,
    SessionService,
    UserService,
)

logger = logging.getLogger(__name__)

# Security scheme for Swagger UI - this adds the padlock icon
security = HTTPBearer(
    scheme_name="Bearer",
    description="Enter the session token returned by /api/auth/login",
    auto_error=False,
)


# ============================================================================
# Request Context
# ============================================================================


def get_client_metadata(request: Request) -> ClientMetadata:
    """Collect ip, user agent and request id for audit records."""
    return ClientMetadata.from_request(request)


def get_session_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    """
    Extract the Bearer session token.

    Raises:
        SessionNotFoundError: If no Bearer token was sent
    """
    if not credentials or not credentials.credentials:
        logger.warning("Authentication failed: missing Bearer token")
        raise SessionNotFoundError("Missing session token")
    return credentials.credentials


# ============================================================================
# Service Dependencies
# ============================================================================


def get_audit_service(request: Request) -> AuditService:
    """
    Dependency to get AuditService instance.

    The audit service opens its own sessions from the application's
    sessionmaker so audit writes never share the request transaction.
    """
    return AuditService(request.app.state.sessionmaker)


def get_session_service(
    db: AsyncSession = Depends(get_db),
    audit_service: AuditService = Depends(get_audit_service),
) -> SessionService:
    return SessionService(db, audit_service)


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    audit_service: AuditService = Depends(get_audit_service),
) -> AuthService:
    """
    Dependency to get AuthService instance.

    Usage:
        @router.post("/login")
        async def login(auth_service: AuthService = Depends(get_auth_service)):
            result = await auth_service.login(...)
    """
    return AuthService(db, audit_service)


def get_user_service(
    db: AsyncSession = Depends(get_db),
    audit_service: AuditService = Depends(get_audit_service),
) -> UserService:
    return UserService(db, audit_service)


def get_organization_service(
    db: AsyncSession = Depends(get_db),
    audit_service: AuditService = Depends(get_audit_service),
) -> OrganizationService:
    return OrganizationService(db, audit_service)


def get_credential_store(db: AsyncSession = Depends(get_db)) -> CredentialStore:
    return CredentialStore(db)


# ============================================================================
# Authentication Dependencies
# ============================================================================


async def get_current_session(
    token: str = Depends(get_session_token),
    session_service: SessionService = Depends(get_session_service),
) -> AuthSession:
    """
    Dependency resolving the Bearer token to a live session.

    Raises:
        SessionNotFoundError: Unknown or revoked token
        SessionExpiredError: Token past its expiry
    """
    return await session_service.authenticate_token(token)


async def get_current_profile(
    current_session: AuthSession = Depends(get_current_session),
    credential_store: CredentialStore = Depends(get_credential_store),
) -> Profile:
    """
    Dependency returning the profile that owns the current session.

    Inactive profiles are returned as well: every authorization check
    denies them, but they can still read their session and log out.

    Usage:
        @router.get("/api/v1/users/me")
        async def me(current_profile: CurrentProfile):
            return current_profile
    """
    profile = await credential_store.find_profile_by_id(current_session.profile_id)
    if profile is None:
        logger.warning(
            f"Authentication failed: session {current_session.id} has no profile"
        )
        raise SessionNotFoundError()
    return profile


# ============================================================================
# Annotated Aliases
# ============================================================================

Client = Annotated[ClientMetadata, Depends(get_client_metadata)]
SessionToken = Annotated[str, Depends(get_session_token)]
CurrentSession = Annotated[AuthSession, Depends(get_current_session)]
CurrentProfile = Annotated[Profile, Depends(get_current_profile)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
AuditServiceDep = Annotated[AuditService, Depends(get_audit_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
OrganizationServiceDep = Annotated[OrganizationService, Depends(get_organization_service)]
