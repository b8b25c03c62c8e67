"""
Database models for the workforce identity service.

This module exports all SQLAlchemy models and the declarative base.
Import models from this module to ensure proper initialization.
"""

from workforce_auth.models.audit_log import AuditRecord
from workforce_auth.models.base import Base
from workforce_auth.models.bootstrap import BootstrapState
from workforce_auth.models.credential import FederatedCredential, LocalCredential
from workforce_auth.models.enums import AuditEventType, FailureReason, Role, SessionKind
from workforce_auth.models.mixins import AuditFieldsMixin, TimestampMixin
from workforce_auth.models.organization import Department, Organization
from workforce_auth.models.profile import Profile
from workforce_auth.models.session import AuthSession

__all__ = [
    # Base
    "Base",
    # Mixins
    "TimestampMixin",
    "AuditFieldsMixin",
    # Enums
    "Role",
    "SessionKind",
    "AuditEventType",
    "FailureReason",
    # Directory models
    "Organization",
    "Department",
    "Profile",
    # Credential models
    "LocalCredential",
    "FederatedCredential",
    # Session models
    "AuthSession",
    # Audit models
    "AuditRecord",
    "BootstrapState",
]
