"""
Pydantic schemas for request validation and response serialization.
"""

from workforce_auth.schemas.audit import AuditRecordFilterParams, AuditRecordResponse
from workforce_auth.schemas.auth import (
    LoginRequest,
    LoginResponse,
    SessionInfo,
    SessionResponse,
)
from workforce_auth.schemas.authorization import (
    AuthorizationCheckRequest,
    AuthorizationCheckResponse,
)
from workforce_auth.schemas.common import (
    ErrorResponse,
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
)
from workforce_auth.schemas.organization import (
    DepartmentCreate,
    DepartmentResponse,
    OrganizationCreate,
    OrganizationResponse,
)
from workforce_auth.schemas.profile import (
    PasswordChange,
    PasswordReset,
    ProfileListItem,
    ProfileResponse,
    UserCreate,
    UserFilterParams,
)

__all__ = [
    "AuditRecordFilterParams",
    "AuditRecordResponse",
    "AuthorizationCheckRequest",
    "AuthorizationCheckResponse",
    "DepartmentCreate",
    "DepartmentResponse",
    "ErrorResponse",
    "LoginRequest",
    "LoginResponse",
    "OrganizationCreate",
    "OrganizationResponse",
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "PasswordChange",
    "PasswordReset",
    "ProfileListItem",
    "ProfileResponse",
    "SessionInfo",
    "SessionResponse",
    "UserCreate",
    "UserFilterParams",
]
