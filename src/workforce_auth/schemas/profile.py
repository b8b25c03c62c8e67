"""
Profile (user) Pydantic schemas for API request/response handling.

This module provides:
- User creation schema (profile + initial local password)
- Profile response schemas
- Password change and reset schemas
- User filter parameters
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from workforce_auth.core.security import validate_password_strength
from workforce_auth.models.enums import Role


def _check_password(value: str) -> str:
    is_valid, error_message = validate_password_strength(value)
    if not is_valid:
        raise ValueError(error_message)
    return value


class UserCreate(BaseModel):
    """
    Schema for creating a user with a local credential.

    Attributes:
        username: Unique login name (no '@')
        display_name: Human label
        password: Initial password (validated for strength)
        role: Role tier
        organization_id: Owning organization (required unless super_admin)
        department_id: Owning department
        phone: Optional contact number
    """

    username: str = Field(
        min_length=3,
        max_length=30,
        pattern=r"^[A-Za-z0-9_.-]+$",
        description="Username (3-30 characters: letters, digits, '_', '.', '-')",
    )
    display_name: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=8, description="Initial password")
    role: Role = Field(default=Role.EMPLOYEE)
    organization_id: uuid.UUID | None = None
    department_id: uuid.UUID | None = None
    phone: str | None = Field(default=None, max_length=32)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        """Validate password strength requirements."""
        return _check_password(value)


class ProfileResponse(BaseModel):
    """
    Profile as exposed to the console.

    Credentials are never part of this schema.
    """

    id: uuid.UUID
    username: str
    display_name: str
    role: Role
    organization_id: uuid.UUID | None
    department_id: uuid.UUID | None
    is_active: bool
    tracking_id: str
    phone: str | None = None
    last_login_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ProfileListItem(BaseModel):
    """Compact profile representation for listings."""

    id: uuid.UUID
    username: str
    display_name: str
    role: Role
    organization_id: uuid.UUID | None
    department_id: uuid.UUID | None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class UserFilterParams(BaseModel):
    """Query filters for listing users."""

    organization_id: uuid.UUID | None = None
    department_id: uuid.UUID | None = None
    role: Role | None = None
    is_active: bool | None = None


class PasswordChange(BaseModel):
    """
    Schema for changing one's own password.

    Attributes:
        current_password: Current password (for verification)
        new_password: New password (validated for strength)
    """

    current_password: str = Field(description="Current password")
    new_password: str = Field(min_length=8, description="New password")

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, value: str) -> str:
        return _check_password(value)


class PasswordReset(BaseModel):
    """Schema for an administrator resetting another user's password."""

    new_password: str = Field(min_length=8, description="New password")

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, value: str) -> str:
        return _check_password(value)
