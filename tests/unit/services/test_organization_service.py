"""
Unit tests for OrganizationService.
"""

import uuid
from unittest.mock import AsyncMock, patch

import pytest

from factories import DEPT_1, DEPT_2, ORG_1, ORG_2
from workforce_auth.exceptions import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
    NotPermittedError,
)
from workforce_auth.models.enums import AuditEventType
from workforce_auth.models.organization import Department, Organization
from workforce_auth.services.organization_service import OrganizationService


@pytest.fixture
def mock_org_repo():
    return AsyncMock()


@pytest.fixture
def mock_dept_repo():
    return AsyncMock()


@pytest.fixture
def organization_service(mock_session, mock_audit_service, mock_org_repo, mock_dept_repo):
    module = "workforce_auth.services.organization_service"
    with (
        patch(f"{module}.OrganizationRepository", return_value=mock_org_repo),
        patch(f"{module}.DepartmentRepository", return_value=mock_dept_repo),
    ):
        service = OrganizationService(mock_session, mock_audit_service)
    return service


class TestOrganizations:
    """Tests for organization create/delete/list."""

    @pytest.mark.asyncio
    async def test_super_admin_creates_organization(
        self, organization_service, mock_org_repo, super_admin, mock_audit_service
    ):
        mock_org_repo.get_by_name.return_value = None
        mock_org_repo.add.side_effect = lambda o: o

        organization = await organization_service.create_organization(super_admin, "Acme")

        assert organization.name == "Acme"
        call = mock_audit_service.log_action.call_args
        assert call.args[0] == AuditEventType.ORG_CREATED
        assert call.kwargs["details"] == {"name": "Acme"}

    @pytest.mark.asyncio
    async def test_org_admin_cannot_create_organization(
        self, organization_service, org_admin
    ):
        with pytest.raises(NotPermittedError):
            await organization_service.create_organization(org_admin, "Rogue Inc")

    @pytest.mark.asyncio
    async def test_duplicate_name(self, organization_service, mock_org_repo, super_admin):
        mock_org_repo.get_by_name.return_value = Organization(id=ORG_1, name="Acme")

        with pytest.raises(AlreadyExistsError):
            await organization_service.create_organization(super_admin, "Acme")

    @pytest.mark.asyncio
    async def test_delete_with_members_conflicts(
        self, organization_service, mock_org_repo, super_admin
    ):
        mock_org_repo.get_by_id.return_value = Organization(id=ORG_1, name="Acme")
        mock_org_repo.count_members.return_value = 4

        with pytest.raises(ConflictError) as exc_info:
            await organization_service.delete_organization(super_admin, ORG_1)

        assert exc_info.value.details == {"members": 4}
        mock_org_repo.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_empty_organization(
        self, organization_service, mock_org_repo, super_admin, mock_audit_service
    ):
        organization = Organization(id=ORG_2, name="Shell Co")
        mock_org_repo.get_by_id.return_value = organization
        mock_org_repo.count_members.return_value = 0

        await organization_service.delete_organization(super_admin, ORG_2)

        mock_org_repo.delete.assert_awaited_once_with(organization)
        assert mock_audit_service.log_action.call_args.args[0] == AuditEventType.ORG_DELETED

    @pytest.mark.asyncio
    async def test_delete_missing_organization(
        self, organization_service, mock_org_repo, super_admin
    ):
        mock_org_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await organization_service.delete_organization(super_admin, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_org_admin_lists_only_own_organization(
        self, organization_service, mock_org_repo, org_admin
    ):
        own = Organization(id=ORG_1, name="Acme")
        mock_org_repo.get_by_id.return_value = own

        assert await organization_service.list_organizations(org_admin) == [own]
        mock_org_repo.list_all.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_super_admin_lists_all(
        self, organization_service, mock_org_repo, super_admin
    ):
        mock_org_repo.list_all.return_value = []

        await organization_service.list_organizations(super_admin, offset=10, limit=5)

        mock_org_repo.list_all.assert_awaited_once_with(offset=10, limit=5)


class TestDepartments:
    """Tests for department operations."""

    @pytest.mark.asyncio
    async def test_org_admin_creates_department(
        self, organization_service, mock_org_repo, mock_dept_repo, org_admin
    ):
        mock_org_repo.get_by_id.return_value = Organization(id=ORG_1, name="Acme")
        mock_dept_repo.get_by_name.return_value = None
        mock_dept_repo.add.side_effect = lambda d: d

        department = await organization_service.create_department(
            org_admin, ORG_1, "Finance"
        )

        assert department.organization_id == ORG_1
        assert department.name == "Finance"

    @pytest.mark.asyncio
    async def test_org_admin_cannot_touch_other_organization(
        self, organization_service, org_admin
    ):
        with pytest.raises(NotPermittedError):
            await organization_service.create_department(org_admin, ORG_2, "Finance")

    @pytest.mark.asyncio
    async def test_manager_cannot_delete_department(self, organization_service, manager):
        with pytest.raises(NotPermittedError):
            await organization_service.delete_department(manager, ORG_1, DEPT_1)

    @pytest.mark.asyncio
    async def test_delete_missing_department(
        self, organization_service, mock_dept_repo, org_admin
    ):
        mock_dept_repo.get_in_organization.return_value = None

        with pytest.raises(NotFoundError):
            await organization_service.delete_department(org_admin, ORG_1, DEPT_2)

    @pytest.mark.asyncio
    async def test_list_departments(self, organization_service, mock_dept_repo, org_admin):
        departments = [Department(id=DEPT_1, organization_id=ORG_1, name="Engineering")]
        mock_dept_repo.list_for_organization.return_value = departments

        assert await organization_service.list_departments(org_admin, ORG_1) == departments
