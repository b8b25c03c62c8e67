"""
Credential repositories.

Local credentials are looked up through their owning profile's username.
Federated credentials are looked up by (provider, subject). Hash
replacement is a single UPDATE so the previous hash is discarded
atomically.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import select, update

from workforce_auth.models.credential import FederatedCredential, LocalCredential
from workforce_auth.models.profile import Profile
from workforce_auth.repositories.base import BaseRepository


class LocalCredentialRepository(BaseRepository[LocalCredential]):
    """Repository for LocalCredential model operations."""

    model = LocalCredential

    async def get_by_username(
        self, username: str
    ) -> tuple[LocalCredential, Profile] | None:
        """
        Get a local credential and its owning profile by exact username.

        Args:
            username: Case-sensitive username

        Returns:
            (credential, profile) or None if no local credential exists
        """
        result = await self.session.execute(
            select(LocalCredential, Profile)
            .join(Profile, Profile.id == LocalCredential.profile_id)
            .where(Profile.username == username)
        )
        row = result.one_or_none()
        if row is None:
            return None
        return row[0], row[1]

    async def get_by_profile_id(self, profile_id: uuid.UUID) -> LocalCredential | None:
        result = await self.session.execute(
            select(LocalCredential).where(LocalCredential.profile_id == profile_id)
        )
        return result.scalar_one_or_none()

    async def replace_hash(
        self,
        profile_id: uuid.UUID,
        password_hash: str,
        hash_algorithm: str,
    ) -> int:
        """
        Replace the stored hash of a profile's local credential.

        Returns:
            Number of rows updated (0 if the profile has no local credential)
        """
        result = await self.session.execute(
            update(LocalCredential)
            .where(LocalCredential.profile_id == profile_id)
            .values(
                password_hash=password_hash,
                hash_algorithm=hash_algorithm,
                changed_at=datetime.now(UTC),
            )
        )
        await self.session.flush()
        return result.rowcount


class FederatedCredentialRepository(BaseRepository[FederatedCredential]):
    """Repository for FederatedCredential model operations."""

    model = FederatedCredential

    async def get_by_subject(
        self, provider: str, provider_subject: str
    ) -> tuple[FederatedCredential, Profile] | None:
        """
        Get a federated credential and its owning profile by provider subject.

        Returns:
            (credential, profile) or None if the subject is not linked
        """
        result = await self.session.execute(
            select(FederatedCredential, Profile)
            .join(Profile, Profile.id == FederatedCredential.profile_id)
            .where(
                FederatedCredential.provider == provider,
                FederatedCredential.provider_subject == provider_subject,
            )
        )
        row = result.one_or_none()
        if row is None:
            return None
        return row[0], row[1]

    async def get_by_profile_id(
        self, profile_id: uuid.UUID
    ) -> FederatedCredential | None:
        result = await self.session.execute(
            select(FederatedCredential).where(
                FederatedCredential.profile_id == profile_id
            )
        )
        return result.scalar_one_or_none()
