"""
Enums shared by the identity models.

These enums are stored as PostgreSQL ENUM types using their values, so the
database holds the same strings the API and the audit trail expose.
"""

import enum


class Role(str, enum.Enum):
    """
    Role tiers of a profile, from broadest to narrowest scope.

    super_admin ⊇ org_admin ⊇ manager ⊇ employee in scope breadth.
    The concrete permissions of each tier live in PermissionService.
    """

    SUPER_ADMIN = "super_admin"
    ORG_ADMIN = "org_admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"

    @property
    def rank(self) -> int:
        """Privilege rank (higher is broader)."""
        return _ROLE_RANK[self]


_ROLE_RANK = {
    Role.EMPLOYEE: 0,
    Role.MANAGER: 1,
    Role.ORG_ADMIN: 2,
    Role.SUPER_ADMIN: 3,
}


class SessionKind(str, enum.Enum):
    """Credential origin of a session. Fixed at creation."""

    FEDERATED = "federated"
    LOCAL = "local"


class AuditEventType(str, enum.Enum):
    """Event types recorded by the audit trail."""

    # Session lifecycle
    SESSION_LOGIN = "session.login"
    SESSION_LOGOUT = "session.logout"
    SESSION_REFRESH = "session.refresh"

    # Privileged actions
    USER_CREATED = "action.user_created"
    USER_DELETED = "action.user_deleted"
    USER_ACTIVATED = "action.user_activated"
    USER_DEACTIVATED = "action.user_deactivated"
    PASSWORD_CHANGED = "action.password_changed"
    ORG_CREATED = "action.org_created"
    ORG_DELETED = "action.org_deleted"


class FailureReason(str, enum.Enum):
    """Internal failure causes recorded on unsuccessful audit events."""

    INVALID_CREDENTIALS = "invalid_credentials"
    INACTIVE = "inactive"
    NO_PROFILE = "no_profile"
    PROVIDER_ERROR = "provider_error"
    SESSION_NOT_FOUND = "session_not_found"


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Persist enum values rather than member names."""
    return [member.value for member in enum_cls]
