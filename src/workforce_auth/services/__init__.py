"""
Service layer for business logic.

This package provides the identity components (credential store, session
manager, authenticator, authorization engine, audit trail) and the
administration services built on top of them.
"""

from workforce_auth.services.audit_service import AuditEvent, AuditService, ClientMetadata
from workforce_auth.services.auth_service import AuthService, LoginResult
from workforce_auth.services.bootstrap_service import BootstrapService
from workforce_auth.services.credential_store import CredentialStore
from workforce_auth.services.federated_identity import FederatedIdentityVerifier
from workforce_auth.services.organization_service import OrganizationService
from workforce_auth.services.permission_service import (
    Action,
    Decision,
    PermissionService,
    Scope,
    ScopeTarget,
)
from workforce_auth.services.session_service import IssuedSession, SessionService
from workforce_auth.services.user_service import UserService

__all__ = [
    "Action",
    "AuditEvent",
    "AuditService",
    "AuthService",
    "BootstrapService",
    "ClientMetadata",
    "CredentialStore",
    "Decision",
    "FederatedIdentityVerifier",
    "IssuedSession",
    "LoginResult",
    "OrganizationService",
    "PermissionService",
    "Scope",
    "ScopeTarget",
    "SessionService",
    "UserService",
]
