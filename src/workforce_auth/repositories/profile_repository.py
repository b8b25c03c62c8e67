"""
Profile repository for the profile directory.

Updates to individual columns (last login, activity flag) are single
UPDATE statements so concurrent writers never overwrite each other.
"""

import uuid
from datetime import datetime

from sqlalchemy import func, select, update

from workforce_auth.models.enums import Role
from workforce_auth.models.profile import Profile
from workforce_auth.repositories.base import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    """
    Repository for Profile model operations.

    Extends BaseRepository with:
    - Username lookups
    - Scoped listing (organization / department)
    - Row-atomic updates of last_login_at and is_active
    """

    model = Profile

    async def get_by_username(self, username: str) -> Profile | None:
        """
        Get a profile by exact (case-sensitive) username.

        Args:
            username: Username to look up

        Returns:
            Profile or None if not found
        """
        result = await self.session.execute(
            select(Profile).where(Profile.username == username)
        )
        return result.scalar_one_or_none()

    async def username_exists(self, username: str) -> bool:
        result = await self.session.execute(
            select(func.count()).select_from(Profile).where(Profile.username == username)
        )
        return result.scalar_one() > 0

    async def list_profiles(
        self,
        organization_id: uuid.UUID | None = None,
        department_id: uuid.UUID | None = None,
        role: Role | None = None,
        is_active: bool | None = None,
        offset: int = 0,
        limit: int = 100,
    ) -> list[Profile]:
        """
        List profiles, optionally restricted to an organization or department.

        Args:
            organization_id: Restrict to this organization
            department_id: Restrict to this department
            role: Restrict to this role
            is_active: Restrict to active or inactive profiles
            offset: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Profiles ordered by username
        """
        query = self._apply_filters(
            select(Profile), organization_id, department_id, role, is_active
        )
        query = query.order_by(Profile.username).offset(offset).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_profiles(
        self,
        organization_id: uuid.UUID | None = None,
        department_id: uuid.UUID | None = None,
        role: Role | None = None,
        is_active: bool | None = None,
    ) -> int:
        """Count profiles matching the same filters as list_profiles."""
        query = self._apply_filters(
            select(func.count()).select_from(Profile),
            organization_id,
            department_id,
            role,
            is_active,
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    @staticmethod
    def _apply_filters(query, organization_id, department_id, role, is_active):
        if organization_id is not None:
            query = query.where(Profile.organization_id == organization_id)
        if department_id is not None:
            query = query.where(Profile.department_id == department_id)
        if role is not None:
            query = query.where(Profile.role == role)
        if is_active is not None:
            query = query.where(Profile.is_active == is_active)
        return query

    async def update_last_login(self, profile_id: uuid.UUID, at: datetime) -> None:
        """
        Set last_login_at in a single statement.

        Args:
            profile_id: Profile to update
            at: Login timestamp
        """
        await self.session.execute(
            update(Profile).where(Profile.id == profile_id).values(last_login_at=at)
        )
        await self.session.flush()

    async def set_active(
        self,
        profile_id: uuid.UUID,
        is_active: bool,
        updated_by: uuid.UUID | None = None,
    ) -> int:
        """
        Set the activity flag in a single statement.

        Returns:
            Number of rows updated (0 if the profile does not exist)
        """
        result = await self.session.execute(
            update(Profile)
            .where(Profile.id == profile_id)
            .values(is_active=is_active, updated_by=updated_by)
        )
        await self.session.flush()
        return result.rowcount
