"""
Authentication Pydantic schemas for API request/response handling.

This module provides:
- Login request (username or email + secret)
- Session response models
"""

from datetime import datetime

from pydantic import BaseModel, Field

from workforce_auth.models.enums import SessionKind
from workforce_auth.schemas.profile import ProfileResponse


class LoginRequest(BaseModel):
    """
    Schema for login request.

    Attributes:
        credential: Username (local login) or email address (federated login)
        secret: Password, or the identity provider's access token
    """

    credential: str = Field(min_length=1, max_length=320, description="Username or email")
    secret: str = Field(min_length=1, description="Password or provider token")


class SessionInfo(BaseModel):
    """
    Session metadata without the token.

    Attributes:
        kind: Credential origin (federated or local)
        issued_at: Issue timestamp
        expires_at: Current expiry
        last_refreshed_at: Last refresh timestamp
    """

    kind: SessionKind
    issued_at: datetime
    expires_at: datetime
    last_refreshed_at: datetime | None = None

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    """
    Schema for a successful login.

    The session token is returned once and must be sent as
    ``Authorization: Bearer <token>`` on every subsequent request.
    """

    session_token: str = Field(description="Opaque session token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_at: datetime = Field(description="Session expiry")
    expires_in: int = Field(description="Seconds until the session expires")
    kind: SessionKind
    profile: ProfileResponse


class SessionResponse(BaseModel):
    """Current session and its profile."""

    session: SessionInfo
    profile: ProfileResponse
