"""
Organization and department administration.

Each operation is an authorization check followed by a plain store call.
Organization creation and deletion are audited.
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from workforce_auth.core.database import store_errors
from workforce_auth.exceptions import AlreadyExistsError, ConflictError, NotFoundError
from workforce_auth.models.enums import AuditEventType
from workforce_auth.models.organization import Department, Organization
from workforce_auth.models.profile import Profile
from workforce_auth.repositories.organization_repository import (
    DepartmentRepository,
    OrganizationRepository,
)
from workforce_auth.services.audit_service import AuditService, ClientMetadata
from workforce_auth.services.permission_service import (
    Action,
    PermissionService,
    Scope,
    ScopeTarget,
)

logger = logging.getLogger(__name__)


class OrganizationService:
    """Service class for organization and department operations."""

    def __init__(self, session: AsyncSession, audit_service: AuditService):
        self.session = session
        self.organization_repo = OrganizationRepository(session)
        self.department_repo = DepartmentRepository(session)
        self.audit_service = audit_service

    async def _get_organization(self, organization_id: uuid.UUID) -> Organization:
        with store_errors("get_organization"):
            organization = await self.organization_repo.get_by_id(organization_id)
        if organization is None:
            raise NotFoundError("Organization")
        return organization

    async def create_organization(
        self,
        actor: Profile,
        name: str,
        client: ClientMetadata | None = None,
    ) -> Organization:
        """
        Create an organization.

        Raises:
            NotPermittedError: If the actor may not create organizations
            AlreadyExistsError: If the name is taken
        """
        PermissionService.require(actor, Action.CREATE_ORGANIZATION, ScopeTarget())

        with store_errors("create_organization"):
            if await self.organization_repo.get_by_name(name) is not None:
                raise AlreadyExistsError("Organization with this name")
            organization = await self.organization_repo.add(
                Organization(name=name, created_by=actor.id, updated_by=actor.id)
            )
            await self.session.commit()

        logger.info(f"Organization created: id={organization.id} name={name} by={actor.id}")
        await self.audit_service.log_action(
            AuditEventType.ORG_CREATED,
            actor_profile_id=actor.id,
            client=client or ClientMetadata(),
            target_organization_id=organization.id,
            details={"name": name},
        )
        return organization

    async def delete_organization(
        self,
        actor: Profile,
        organization_id: uuid.UUID,
        client: ClientMetadata | None = None,
    ) -> None:
        """
        Delete an organization and its departments.

        Raises:
            NotFoundError: If the organization does not exist
            NotPermittedError: If the actor may not delete it
            ConflictError: If profiles still belong to it
        """
        organization = await self._get_organization(organization_id)
        PermissionService.require(
            actor,
            Action.DELETE_ORGANIZATION,
            ScopeTarget(organization_id=organization.id),
        )

        with store_errors("delete_organization"):
            members = await self.organization_repo.count_members(organization.id)
            if members:
                raise ConflictError(
                    "Organization still has members",
                    details={"members": members},
                )
            name = organization.name
            await self.organization_repo.delete(organization)
            await self.session.commit()

        logger.info(f"Organization deleted: id={organization_id} name={name} by={actor.id}")
        await self.audit_service.log_action(
            AuditEventType.ORG_DELETED,
            actor_profile_id=actor.id,
            client=client or ClientMetadata(),
            target_organization_id=organization_id,
            details={"name": name},
        )

    async def list_organizations(
        self,
        actor: Profile,
        offset: int = 0,
        limit: int = 100,
    ) -> list[Organization]:
        """
        List organizations visible to the actor.

        Actors with read_organization at all_organizations see every
        organization; actors scoped to their own organization see only it.
        """
        scope = PermissionService.broadest_scope(actor.role, Action.READ_ORGANIZATION)
        if scope != Scope.ALL_ORGANIZATIONS:
            PermissionService.require(
                actor,
                Action.READ_ORGANIZATION,
                ScopeTarget(organization_id=actor.organization_id),
            )
            if actor.organization_id is None:
                return []
            return [await self._get_organization(actor.organization_id)]

        PermissionService.require(actor, Action.READ_ORGANIZATION, ScopeTarget())
        with store_errors("list_organizations"):
            return await self.organization_repo.list_all(offset=offset, limit=limit)

    async def create_department(
        self,
        actor: Profile,
        organization_id: uuid.UUID,
        name: str,
    ) -> Department:
        """
        Create a department inside an organization.

        Raises:
            NotFoundError: If the organization does not exist
            NotPermittedError: If outside the actor's scope
            AlreadyExistsError: If the name is taken in that organization
        """
        PermissionService.require(
            actor,
            Action.CREATE_DEPARTMENT,
            ScopeTarget(organization_id=organization_id),
        )
        await self._get_organization(organization_id)

        with store_errors("create_department"):
            if await self.department_repo.get_by_name(organization_id, name) is not None:
                raise AlreadyExistsError("Department with this name")
            department = await self.department_repo.add(
                Department(
                    organization_id=organization_id,
                    name=name,
                    created_by=actor.id,
                    updated_by=actor.id,
                )
            )
            await self.session.commit()

        logger.info(
            f"Department created: id={department.id} org={organization_id} by={actor.id}"
        )
        return department

    async def delete_department(
        self,
        actor: Profile,
        organization_id: uuid.UUID,
        department_id: uuid.UUID,
    ) -> None:
        """
        Delete a department. Its profiles stay in the organization without one.

        Raises:
            NotPermittedError: If outside the actor's scope
            NotFoundError: If the department is not in the organization
        """
        PermissionService.require(
            actor,
            Action.DELETE_DEPARTMENT,
            ScopeTarget(organization_id=organization_id, department_id=department_id),
        )

        with store_errors("delete_department"):
            department = await self.department_repo.get_in_organization(
                organization_id, department_id
            )
            if department is None:
                raise NotFoundError("Department")
            await self.department_repo.delete(department)
            await self.session.commit()

        logger.info(f"Department deleted: id={department_id} by={actor.id}")

    async def list_departments(
        self,
        actor: Profile,
        organization_id: uuid.UUID,
    ) -> list[Department]:
        PermissionService.require(
            actor,
            Action.READ_DEPARTMENT,
            ScopeTarget(organization_id=organization_id),
        )
        with store_errors("list_departments"):
            return await self.department_repo.list_for_organization(organization_id)
