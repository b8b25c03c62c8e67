"""
Unit tests for PermissionService.

The authorization engine is pure, so these tests need no mocks at all.
"""

import uuid

import pytest

from factories import DEPT_1, DEPT_2, ORG_1, ORG_2, make_profile
from workforce_auth.exceptions import NotPermittedError
from workforce_auth.models.enums import Role
from workforce_auth.services.permission_service import (
    Action,
    Decision,
    DenyReason,
    PermissionService,
    Scope,
    ScopeTarget,
)


class TestRolePermissionTable:
    """Tests for the static role -> (action, scope) table."""

    def test_table_is_total(self):
        """Every role has an entry."""
        assert set(PermissionService.ROLE_PERMISSIONS) == set(Role)

    def test_super_admin_owns_every_action_everywhere(self):
        """super_admin owns each action at all_organizations."""
        for action in Action:
            assert PermissionService.scopes_for(Role.SUPER_ADMIN, action) == [
                Scope.ALL_ORGANIZATIONS
            ]

    def test_employee_cannot_create_users(self):
        """employee has no create_user pair at all."""
        assert PermissionService.scopes_for(Role.EMPLOYEE, Action.CREATE_USER) == []
        assert PermissionService.broadest_scope(Role.EMPLOYEE, Action.CREATE_USER) is None

    def test_broadest_scope(self):
        """broadest_scope picks the widest owned scope."""
        assert (
            PermissionService.broadest_scope(Role.ORG_ADMIN, Action.READ_USER)
            == Scope.OWN_ORGANIZATION
        )
        assert (
            PermissionService.broadest_scope(Role.MANAGER, Action.READ_USER)
            == Scope.OWN_DEPARTMENT
        )


class TestAuthorizeScenarios:
    """Tests for the documented authorization scenarios."""

    def test_manager_in_own_department_is_allowed(self):
        """Manager P1 (O1/D1) may create users in O1/D1."""
        p1 = make_profile(Role.MANAGER, ORG_1, DEPT_1)
        decision = PermissionService.authorize(
            p1, Action.CREATE_USER, ScopeTarget(ORG_1, DEPT_1)
        )
        assert decision == Decision.allow()

    def test_manager_in_other_department_is_denied(self):
        """The same manager may not create users in O1/D2."""
        p1 = make_profile(Role.MANAGER, ORG_1, DEPT_1)
        decision = PermissionService.authorize(
            p1, Action.CREATE_USER, ScopeTarget(ORG_1, DEPT_2)
        )
        assert decision == Decision.deny(DenyReason.NOT_PERMITTED)

    def test_org_admin_in_any_department_of_own_org_is_allowed(self):
        """Org admin P2 (O1) may create users in O1/D2."""
        p2 = make_profile(Role.ORG_ADMIN, ORG_1, None)
        decision = PermissionService.authorize(
            p2, Action.CREATE_USER, ScopeTarget(ORG_1, DEPT_2)
        )
        assert decision.allowed is True

    def test_org_admin_in_other_org_is_denied(self):
        """Org admins are confined to their own organization."""
        p2 = make_profile(Role.ORG_ADMIN, ORG_1, None)
        decision = PermissionService.authorize(
            p2, Action.READ_USER, ScopeTarget(ORG_2, DEPT_1)
        )
        assert decision.reason == DenyReason.NOT_PERMITTED

    def test_super_admin_is_allowed_anywhere(self, super_admin):
        """super_admin is allowed on any target."""
        for target in (ScopeTarget(), ScopeTarget(ORG_2, DEPT_2), ScopeTarget(ORG_1)):
            assert PermissionService.authorize(
                super_admin, Action.DELETE_ORGANIZATION, target
            ).allowed

    def test_unowned_action_is_denied(self, employee):
        """An action the role does not own is denied with not_permitted."""
        decision = PermissionService.authorize(
            employee, Action.DELETE_USER, ScopeTarget(ORG_1, DEPT_1)
        )
        assert decision == Decision.deny(DenyReason.NOT_PERMITTED)


class TestInactiveProfiles:
    """Tests for the inactive short-circuit."""

    @pytest.mark.parametrize("role", list(Role))
    def test_inactive_profile_is_denied_everything(self, role):
        """Deactivated profiles are denied even actions they own."""
        profile = make_profile(role, is_active=False)
        for action in Action:
            decision = PermissionService.authorize(
                profile, action, ScopeTarget(profile.organization_id, profile.department_id)
            )
            assert decision == Decision.deny(DenyReason.INACTIVE)


class TestScopeMatching:
    """Tests for scope_matches edge cases."""

    def test_target_without_organization_matches_org_and_department(self, manager):
        """Targets with no organization and no profile match both scopes."""
        target = ScopeTarget()
        assert PermissionService.scope_matches(manager, Scope.OWN_ORGANIZATION, target)
        assert PermissionService.scope_matches(manager, Scope.OWN_DEPARTMENT, target)

    def test_own_department_requires_both_components(self, manager):
        """own_department needs organization and department to match."""
        assert not PermissionService.scope_matches(
            manager, Scope.OWN_DEPARTMENT, ScopeTarget(ORG_2, DEPT_1)
        )
        assert not PermissionService.scope_matches(
            manager, Scope.OWN_DEPARTMENT, ScopeTarget(ORG_1, None)
        )

    def test_existing_profile_without_organization_is_out_of_scope(self, super_admin):
        """A profile with no organization is not readable through own_* scopes."""
        target = ScopeTarget(profile_id=super_admin.id)
        for role in (Role.ORG_ADMIN, Role.MANAGER, Role.EMPLOYEE):
            for organization_id in (ORG_1, ORG_2):
                actor = make_profile(role, organization_id, DEPT_2)
                decision = PermissionService.authorize(actor, Action.READ_USER, target)
                assert decision == Decision.deny(DenyReason.NOT_PERMITTED)

    def test_self_target_without_organization_matches(self, manager):
        """The profile itself is still inside its own org-less scope."""
        target = ScopeTarget(profile_id=manager.id)
        assert PermissionService.scope_matches(manager, Scope.OWN_ORGANIZATION, target)
        assert PermissionService.scope_matches(manager, Scope.OWN_DEPARTMENT, target)

    def test_own_department_requires_a_department(self):
        """A profile without a department matches no department-scoped target."""
        manager = make_profile(Role.MANAGER, ORG_1, None)
        for target in (
            ScopeTarget(ORG_1, None),
            ScopeTarget(ORG_1, None, uuid.uuid4()),
            ScopeTarget(ORG_1, DEPT_1),
        ):
            assert not PermissionService.scope_matches(
                manager, Scope.OWN_DEPARTMENT, target
            )

    def test_own_profile(self, employee):
        """own_profile only matches the profile itself."""
        assert PermissionService.scope_matches(
            employee, Scope.OWN_PROFILE, ScopeTarget(profile_id=employee.id)
        )
        assert not PermissionService.scope_matches(
            employee, Scope.OWN_PROFILE, ScopeTarget(profile_id=uuid.uuid4())
        )
        assert not PermissionService.scope_matches(employee, Scope.OWN_PROFILE, ScopeTarget())

    def test_change_own_password_only_for_self(self, employee):
        """change_own_password is granted on the own profile only."""
        assert PermissionService.authorize(
            employee, Action.CHANGE_OWN_PASSWORD, ScopeTarget(profile_id=employee.id)
        ).allowed
        assert not PermissionService.authorize(
            employee, Action.CHANGE_OWN_PASSWORD, ScopeTarget(profile_id=uuid.uuid4())
        ).allowed


class TestProperties:
    """Tests for purity and role containment."""

    def test_authorize_is_deterministic(self, manager):
        """Repeated calls on the same inputs return the same decision."""
        target = ScopeTarget(ORG_1, DEPT_2)
        decisions = {
            PermissionService.authorize(manager, Action.UPDATE_USER, target)
            for _ in range(50)
        }
        assert len(decisions) == 1

    def test_manager_actions_are_contained_in_org_admin_and_super_admin(
        self, super_admin
    ):
        """Anything a manager may do in its department, broader roles may do too."""
        manager = make_profile(Role.MANAGER, ORG_1, DEPT_1)
        org_admin = make_profile(Role.ORG_ADMIN, ORG_1, None)
        target = ScopeTarget(ORG_1, DEPT_1)

        for action in Action:
            if Scope.OWN_DEPARTMENT not in PermissionService.scopes_for(
                Role.MANAGER, action
            ):
                continue
            assert PermissionService.authorize(manager, action, target).allowed
            assert PermissionService.authorize(org_admin, action, target).allowed
            assert PermissionService.authorize(super_admin, action, target).allowed


class TestRequire:
    """Tests for the raising variant."""

    def test_require_allows_silently(self, org_admin):
        """require returns None on Allow."""
        assert (
            PermissionService.require(org_admin, Action.READ_USER, ScopeTarget(ORG_1))
            is None
        )

    def test_require_raises_with_reason(self, employee):
        """require raises NotPermittedError carrying the deny reason and action."""
        with pytest.raises(NotPermittedError) as exc_info:
            PermissionService.require(employee, Action.DELETE_USER, ScopeTarget(ORG_1))

        assert exc_info.value.status_code == 403
        assert exc_info.value.details == {
            "reason": "not_permitted",
            "action": "delete_user",
        }

    def test_require_reports_inactive(self):
        """Inactive profiles get reason inactive."""
        profile = make_profile(Role.ORG_ADMIN, is_active=False)
        with pytest.raises(NotPermittedError) as exc_info:
            PermissionService.require(profile, Action.READ_USER, ScopeTarget(ORG_1))
        assert exc_info.value.reason == "inactive"
