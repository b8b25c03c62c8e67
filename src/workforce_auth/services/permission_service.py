"""
Authorization engine.

This module provides:
- The static role -> (action, scope) permission table
- Scope matching against a target (own profile, department, organization)
- authorize(): a pure decision function, safe to call on every request
- require(): the raising variant used by services

Every permission decision in the service goes through this module; no
other code branches on roles.
"""

import enum
import logging
import uuid
from dataclasses import dataclass
from typing import Protocol

from workforce_auth.exceptions import NotPermittedError
from workforce_auth.models.enums import Role

logger = logging.getLogger(__name__)


class Action(str, enum.Enum):
    """Actions that can be authorized."""

    CREATE_ORGANIZATION = "create_organization"
    READ_ORGANIZATION = "read_organization"
    UPDATE_ORGANIZATION = "update_organization"
    DELETE_ORGANIZATION = "delete_organization"

    CREATE_USER = "create_user"
    READ_USER = "read_user"
    UPDATE_USER = "update_user"
    DELETE_USER = "delete_user"

    CREATE_DEPARTMENT = "create_department"
    READ_DEPARTMENT = "read_department"
    UPDATE_DEPARTMENT = "update_department"
    DELETE_DEPARTMENT = "delete_department"

    VIEW_REPORTS = "view_reports"
    READ_AUDIT_LOG = "read_audit_log"
    CHANGE_OWN_PASSWORD = "change_own_password"


class Scope(str, enum.Enum):
    """Breadth at which a permission applies, narrowest first."""

    OWN_PROFILE = "own_profile"
    OWN_DEPARTMENT = "own_department"
    OWN_ORGANIZATION = "own_organization"
    ALL_ORGANIZATIONS = "all_organizations"

    @property
    def breadth(self) -> int:
        return list(Scope).index(self)


class DenyReason(str, enum.Enum):
    """Why a decision was Deny."""

    INACTIVE = "inactive"
    NOT_PERMITTED = "not_permitted"


@dataclass(frozen=True)
class ScopeTarget:
    """
    What an action applies to.

    Any component may be None. A target without an organization
    component (creating an organization or a self-scoped action)
    matches own_organization and own_department scopes unless it names
    another existing profile.
    """

    organization_id: uuid.UUID | None = None
    department_id: uuid.UUID | None = None
    profile_id: uuid.UUID | None = None


@dataclass(frozen=True)
class Decision:
    """Result of an authorization check: Allow, or Deny with a reason."""

    allowed: bool
    reason: DenyReason | None = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> "Decision":
        return cls(allowed=False, reason=reason)


class Principal(Protocol):
    """The profile attributes the engine reads."""

    id: uuid.UUID
    role: Role
    organization_id: uuid.UUID | None
    department_id: uuid.UUID | None
    is_active: bool


def _pairs(scope: Scope, *actions: Action) -> frozenset[tuple[Action, Scope]]:
    return frozenset((action, scope) for action in actions)


_USER_CRUD = (Action.CREATE_USER, Action.READ_USER, Action.UPDATE_USER, Action.DELETE_USER)
_DEPARTMENT_CRUD = (
    Action.CREATE_DEPARTMENT,
    Action.READ_DEPARTMENT,
    Action.UPDATE_DEPARTMENT,
    Action.DELETE_DEPARTMENT,
)


class PermissionService:
    """
    Role-based authorization with scope matching.

    ROLE_PERMISSIONS is the single source of truth: each role owns a fixed
    set of (action, scope) pairs. super_admin owns every action at
    all_organizations.
    """

    ROLE_PERMISSIONS: dict[Role, frozenset[tuple[Action, Scope]]] = {
        Role.SUPER_ADMIN: _pairs(Scope.ALL_ORGANIZATIONS, *Action),
        Role.ORG_ADMIN: (
            _pairs(
                Scope.OWN_ORGANIZATION,
                *_USER_CRUD,
                *_DEPARTMENT_CRUD,
                Action.READ_ORGANIZATION,
                Action.VIEW_REPORTS,
                Action.READ_AUDIT_LOG,
            )
            | _pairs(Scope.OWN_PROFILE, Action.CHANGE_OWN_PASSWORD)
        ),
        Role.MANAGER: (
            _pairs(
                Scope.OWN_DEPARTMENT,
                Action.CREATE_USER,
                Action.READ_USER,
                Action.UPDATE_USER,
                Action.VIEW_REPORTS,
            )
            | _pairs(Scope.OWN_PROFILE, Action.CHANGE_OWN_PASSWORD)
        ),
        Role.EMPLOYEE: (
            _pairs(Scope.OWN_DEPARTMENT, Action.READ_USER)
            | _pairs(Scope.OWN_PROFILE, Action.CHANGE_OWN_PASSWORD)
        ),
    }

    @classmethod
    def scopes_for(cls, role: Role, action: Action) -> list[Scope]:
        """
        Get the scopes at which a role owns an action, broadest first.

        Returns:
            Empty list if the role does not own the action at all
        """
        scopes = [scope for owned, scope in cls.ROLE_PERMISSIONS[role] if owned == action]
        return sorted(scopes, key=lambda s: s.breadth, reverse=True)

    @classmethod
    def broadest_scope(cls, role: Role, action: Action) -> Scope | None:
        scopes = cls.scopes_for(role, action)
        return scopes[0] if scopes else None

    @staticmethod
    def scope_matches(profile: Principal, scope: Scope, target: ScopeTarget) -> bool:
        """
        Check whether a target falls inside a profile's scope.

        Rules:
            all_organizations: always
            own_organization: organizations equal, or the target has no
                organization and is not another existing profile
            own_department: the same org-less rule, otherwise the profile
                has a department and both organization and department equal
            own_profile: target profile is the profile itself

        An existing profile without an organization (a super_admin) is
        therefore outside every own_* scope but its own.
        """
        if scope == Scope.ALL_ORGANIZATIONS:
            return True

        if scope == Scope.OWN_PROFILE:
            return target.profile_id is not None and target.profile_id == profile.id

        if target.organization_id is None:
            return target.profile_id is None or target.profile_id == profile.id

        if scope == Scope.OWN_ORGANIZATION:
            return profile.organization_id == target.organization_id

        if scope == Scope.OWN_DEPARTMENT:
            return (
                profile.department_id is not None
                and profile.organization_id == target.organization_id
                and profile.department_id == target.department_id
            )

        return False

    @classmethod
    def authorize(
        cls,
        profile: Principal,
        action: Action,
        target: ScopeTarget,
    ) -> Decision:
        """
        Decide whether a profile may perform an action on a target.

        Pure function of its inputs: no I/O, no clock, no hidden state.

        Args:
            profile: Acting profile
            action: Requested action
            target: What the action applies to

        Returns:
            Decision.allow(), or Decision.deny(reason)

        Example:
            decision = PermissionService.authorize(
                manager, Action.CREATE_USER, ScopeTarget(org_id, dept_id)
            )
            if not decision.allowed:
                ...
        """
        if not profile.is_active:
            return Decision.deny(DenyReason.INACTIVE)

        for scope in cls.scopes_for(profile.role, action):
            if cls.scope_matches(profile, scope, target):
                return Decision.allow()

        return Decision.deny(DenyReason.NOT_PERMITTED)

    @classmethod
    def require(
        cls,
        profile: Principal,
        action: Action,
        target: ScopeTarget,
    ) -> None:
        """
        Authorize or raise.

        Raises:
            NotPermittedError: If the decision is Deny
        """
        decision = cls.authorize(profile, action, target)
        if not decision.allowed:
            logger.warning(
                f"Permission denied: profile={profile.id} action={action.value} "
                f"reason={decision.reason.value}"
            )
            raise NotPermittedError(reason=decision.reason.value, action=action.value)
