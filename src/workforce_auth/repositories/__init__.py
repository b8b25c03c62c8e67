"""
Database repositories for the workforce identity service.

This module exports all repository classes for database operations.
"""

from workforce_auth.repositories.audit_repository import AuditRecordRepository
from workforce_auth.repositories.base import BaseRepository
from workforce_auth.repositories.credential_repository import (
    FederatedCredentialRepository,
    LocalCredentialRepository,
)
from workforce_auth.repositories.organization_repository import (
    DepartmentRepository,
    OrganizationRepository,
)
from workforce_auth.repositories.profile_repository import ProfileRepository
from workforce_auth.repositories.session_repository import SessionRepository

__all__ = [
    "BaseRepository",
    "ProfileRepository",
    "LocalCredentialRepository",
    "FederatedCredentialRepository",
    "SessionRepository",
    "AuditRecordRepository",
    "OrganizationRepository",
    "DepartmentRepository",
]
