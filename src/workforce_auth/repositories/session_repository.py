"""
AuthSession repository for session lifecycle operations.

Every state change is a conditional UPDATE on a single row:
- extend only while the row is live (not revoked, not expired)
- revoke only while the row is not already revoked

A refresh racing a revoke therefore always ends revoked: once the
tombstone is written, the refresh predicate no longer matches.
"""

import uuid
from datetime import datetime

from sqlalchemy import delete, select, update

from workforce_auth.models.profile import Profile
from workforce_auth.models.session import AuthSession
from workforce_auth.repositories.base import BaseRepository


class SessionRepository(BaseRepository[AuthSession]):
    """
    Repository for AuthSession model operations.

    Extends BaseRepository with:
    - Token hash lookups
    - Conditional expiry extension
    - Idempotent revocation
    - Expired session cleanup
    """

    model = AuthSession

    async def get_by_token_hash(self, token_hash: str) -> AuthSession | None:
        """
        Get a session by the hash of its token, whatever its state.

        Args:
            token_hash: SHA-256 hash of the session token

        Returns:
            AuthSession or None if not found
        """
        result = await self.session.execute(
            select(AuthSession).where(AuthSession.token_hash == token_hash)
        )
        return result.scalar_one_or_none()

    async def extend_if_live(
        self,
        token_hash: str,
        now: datetime,
        expires_at: datetime,
    ) -> AuthSession | None:
        """
        Move expires_at forward if the session is still live at ``now``.

        Args:
            token_hash: SHA-256 hash of the session token
            now: Evaluation time
            expires_at: New expiry

        Returns:
            The updated session, or None if it was unknown, revoked or expired
        """
        result = await self.session.execute(
            update(AuthSession)
            .where(
                AuthSession.token_hash == token_hash,
                AuthSession.revoked_at.is_(None),
                AuthSession.expires_at > now,
            )
            .values(expires_at=expires_at, last_refreshed_at=now)
            .returning(AuthSession)
            .execution_options(synchronize_session=False)
        )
        updated = result.scalar_one_or_none()
        await self.session.flush()
        return updated

    async def revoke(self, token_hash: str, now: datetime) -> AuthSession | None:
        """
        Write the revocation tombstone if not already present.

        Returns:
            The revoked session, or None if it was unknown or already revoked
        """
        result = await self.session.execute(
            update(AuthSession)
            .where(
                AuthSession.token_hash == token_hash,
                AuthSession.revoked_at.is_(None),
            )
            .values(revoked_at=now)
            .returning(AuthSession)
            .execution_options(synchronize_session=False)
        )
        revoked = result.scalar_one_or_none()
        await self.session.flush()
        return revoked

    async def list_live_for_profile(
        self, profile_id: uuid.UUID, now: datetime
    ) -> list[AuthSession]:
        """Get all live sessions of a profile, newest first."""
        result = await self.session.execute(
            select(AuthSession)
            .where(
                AuthSession.profile_id == profile_id,
                AuthSession.revoked_at.is_(None),
                AuthSession.expires_at > now,
            )
            .order_by(AuthSession.issued_at.desc())
        )
        return list(result.scalars().all())

    async def delete_expired(self, before: datetime) -> int:
        """
        Delete sessions that expired before the given time.

        Returns:
            Number of sessions deleted
        """
        result = await self.session.execute(
            delete(AuthSession).where(AuthSession.expires_at < before)
        )
        await self.session.flush()
        return result.rowcount

    async def get_profile_organization_id(
        self, profile_id: uuid.UUID
    ) -> uuid.UUID | None:
        """Organization of a session's owning profile, for audit records."""
        result = await self.session.execute(
            select(Profile.organization_id).where(Profile.id == profile_id)
        )
        return result.scalar_one_or_none()
