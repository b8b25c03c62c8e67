"""
Organization and Department repositories.
"""

import uuid

from sqlalchemy import func, select

from workforce_auth.models.organization import Department, Organization
from workforce_auth.models.profile import Profile
from workforce_auth.repositories.base import BaseRepository


class OrganizationRepository(BaseRepository[Organization]):
    """Repository for Organization model operations."""

    model = Organization

    async def get_by_name(self, name: str) -> Organization | None:
        result = await self.session.execute(
            select(Organization).where(Organization.name == name)
        )
        return result.scalar_one_or_none()

    async def list_all(self, offset: int = 0, limit: int = 100) -> list[Organization]:
        result = await self.session.execute(
            select(Organization).order_by(Organization.name).offset(offset).limit(limit)
        )
        return list(result.scalars().all())

    async def count_members(self, organization_id: uuid.UUID) -> int:
        """Count profiles that belong to the organization."""
        result = await self.session.execute(
            select(func.count())
            .select_from(Profile)
            .where(Profile.organization_id == organization_id)
        )
        return result.scalar_one()


class DepartmentRepository(BaseRepository[Department]):
    """Repository for Department model operations."""

    model = Department

    async def get_in_organization(
        self, organization_id: uuid.UUID, department_id: uuid.UUID
    ) -> Department | None:
        """Get a department only if it belongs to the given organization."""
        result = await self.session.execute(
            select(Department).where(
                Department.id == department_id,
                Department.organization_id == organization_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_by_name(
        self, organization_id: uuid.UUID, name: str
    ) -> Department | None:
        result = await self.session.execute(
            select(Department).where(
                Department.organization_id == organization_id,
                Department.name == name,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_organization(self, organization_id: uuid.UUID) -> list[Department]:
        result = await self.session.execute(
            select(Department)
            .where(Department.organization_id == organization_id)
            .order_by(Department.name)
        )
        return list(result.scalars().all())
