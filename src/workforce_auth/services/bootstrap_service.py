"""
Super administrator seeding.

This module provides:
- is_bootstrap_completed(): whether the one-time seeding already ran
- get_super_admin_profile(): the seeded super_admin profile
- ensure_super_admin(): create the profile and the bootstrap row once

The seeded profile is a real row in the profile directory. Federated logins
that match the configured allow-list are linked to it by the authenticator.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workforce_auth.core.config import settings
from workforce_auth.core.database import store_errors
from workforce_auth.core.security import generate_tracking_id
from workforce_auth.exceptions import ConflictError
from workforce_auth.models.bootstrap import BootstrapState
from workforce_auth.models.enums import AuditEventType, Role
from workforce_auth.models.profile import Profile
from workforce_auth.repositories.profile_repository import ProfileRepository
from workforce_auth.services.audit_service import AuditService, ClientMetadata

logger = logging.getLogger(__name__)


class BootstrapService:
    """
    Service class for the super administrator seeding step.

    Runs at application startup (bootstrap_on_startup) and, as a fallback,
    on the first allow-listed federated login.
    """

    def __init__(self, session: AsyncSession, audit_service: AuditService):
        """
        Initialize BootstrapService.

        Args:
            session: Async database session
            audit_service: Audit trail for the seeding event
        """
        self.session = session
        self.profile_repo = ProfileRepository(session)
        self.audit_service = audit_service

    async def _get_state(self) -> BootstrapState | None:
        with store_errors("get_bootstrap_state"):
            result = await self.session.execute(select(BootstrapState))
            return result.scalar_one_or_none()

    async def is_bootstrap_completed(self) -> bool:
        """
        Check if bootstrap has been completed.

        Returns:
            True if the bootstrap_state row exists
        """
        state = await self._get_state()
        return state is not None and state.completed

    async def get_super_admin_profile(self) -> Profile | None:
        """
        Get the seeded super administrator profile.

        Returns:
            Profile, or None if seeding has not run or the profile was deleted
        """
        state = await self._get_state()
        if state is None or state.admin_profile_id is None:
            return None
        with store_errors("get_super_admin_profile"):
            return await self.profile_repo.get_by_id(state.admin_profile_id)

    async def ensure_super_admin(
        self, client: ClientMetadata | None = None
    ) -> Profile | None:
        """
        Seed the super administrator profile if it was never seeded.

        Seeding happens at most once: if the bootstrap row exists but its
        profile was deleted afterwards, nothing is re-created.

        Args:
            client: Client metadata for the audit record

        Returns:
            The super administrator profile, or None if it was deleted
        """
        if await self.is_bootstrap_completed():
            return await self.get_super_admin_profile()

        profile = Profile(
            username=settings.super_admin_username,
            display_name=settings.super_admin_display_name,
            role=Role.SUPER_ADMIN,
            organization_id=None,
            is_active=True,
            tracking_id=generate_tracking_id(),
        )

        try:
            with store_errors("seed_super_admin"):
                profile = await self.profile_repo.add(profile)
                self.session.add(
                    BootstrapState(
                        completed=True,
                        completed_at=datetime.now(UTC),
                        admin_profile_id=profile.id,
                    )
                )
                await self.session.flush()
                await self.session.commit()
        except ConflictError:
            # Another process seeded concurrently
            await self.session.rollback()
            logger.info("Super admin already seeded by a concurrent process")
            return await self.get_super_admin_profile()

        logger.info(
            f"Super admin seeded: id={profile.id} username={profile.username}"
        )

        await self.audit_service.log_action(
            AuditEventType.USER_CREATED,
            actor_profile_id=None,
            client=client or ClientMetadata(),
            target_profile_id=profile.id,
            details={
                "source": "bootstrap",
                "username": profile.username,
                "role": Role.SUPER_ADMIN.value,
            },
        )

        return profile
