"""
Credential store.

This module provides the persistence boundary for credentials and the
profile lookups the authenticator needs:
- find_local_credential_by_username / find_federated_credential_by_subject
- find_profile_by_id / update_last_login
- insert_local_credential / insert_federated_credential
- replace_local_credential_hash
- verify_local_password (hash comparison never leaves this module)

Every call runs inside store_errors(), so an unreachable database surfaces
as ServiceUnavailableError rather than as a failed login.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from workforce_auth.core.database import store_errors
from workforce_auth.core.security import (
    HASH_ALGORITHM,
    hash_password,
    password_needs_rehash,
    verify_dummy_password,
    verify_password,
)
from workforce_auth.models.credential import FederatedCredential, LocalCredential
from workforce_auth.models.profile import Profile
from workforce_auth.repositories.credential_repository import (
    FederatedCredentialRepository,
    LocalCredentialRepository,
)
from workforce_auth.repositories.profile_repository import ProfileRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalVerification:
    """
    Outcome of a username/password check.

    profile is None when no local credential exists for the username.
    password_ok is only meaningful when profile is set.
    """

    profile: Profile | None
    password_ok: bool


class CredentialStore:
    """
    Adapter over the credential and profile tables.

    Password hashes stay inside this class: callers receive profiles and
    booleans, never LocalCredential rows.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize CredentialStore.

        Args:
            session: Async database session
        """
        self.session = session
        self.profile_repo = ProfileRepository(session)
        self.local_repo = LocalCredentialRepository(session)
        self.federated_repo = FederatedCredentialRepository(session)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    async def find_local_credential_by_username(
        self, username: str
    ) -> tuple[LocalCredential, Profile] | None:
        with store_errors("find_local_credential_by_username"):
            return await self.local_repo.get_by_username(username)

    async def find_federated_credential_by_subject(
        self, provider: str, provider_subject: str
    ) -> tuple[FederatedCredential, Profile] | None:
        with store_errors("find_federated_credential_by_subject"):
            return await self.federated_repo.get_by_subject(provider, provider_subject)

    async def find_profile_by_id(self, profile_id: uuid.UUID) -> Profile | None:
        with store_errors("find_profile_by_id"):
            return await self.profile_repo.get_by_id(profile_id)

    async def find_federated_credential_by_profile_id(
        self, profile_id: uuid.UUID
    ) -> FederatedCredential | None:
        with store_errors("find_federated_credential_by_profile_id"):
            return await self.federated_repo.get_by_profile_id(profile_id)

    async def has_local_credential(self, profile_id: uuid.UUID) -> bool:
        with store_errors("has_local_credential"):
            return await self.local_repo.get_by_profile_id(profile_id) is not None

    # -------------------------------------------------------------------------
    # Verification
    # -------------------------------------------------------------------------

    async def verify_local_password(
        self, username: str, password: str
    ) -> LocalVerification:
        """
        Check a username/password pair.

        When the username is unknown a dummy hash is still verified so both
        failure paths cost the same. A matching password whose hash was
        produced with outdated parameters is transparently re-hashed.

        Args:
            username: Case-sensitive username
            password: Plain text password

        Returns:
            LocalVerification with the owning profile (or None) and the result
        """
        found = await self.find_local_credential_by_username(username)
        if found is None:
            verify_dummy_password(password)
            return LocalVerification(profile=None, password_ok=False)

        credential, profile = found
        if not verify_password(password, credential.password_hash):
            return LocalVerification(profile=profile, password_ok=False)

        if password_needs_rehash(credential.password_hash):
            logger.info(f"Rotating password hash parameters for profile {profile.id}")
            await self.replace_local_credential_hash(profile.id, password)

        return LocalVerification(profile=profile, password_ok=True)

    async def verify_password_for_profile(
        self, profile_id: uuid.UUID, password: str
    ) -> bool:
        """Check a password against a profile's local credential."""
        with store_errors("verify_password_for_profile"):
            credential = await self.local_repo.get_by_profile_id(profile_id)
        if credential is None:
            verify_dummy_password(password)
            return False
        return verify_password(password, credential.password_hash)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def update_last_login(
        self, profile_id: uuid.UUID, at: datetime | None = None
    ) -> None:
        with store_errors("update_last_login"):
            await self.profile_repo.update_last_login(profile_id, at or datetime.now(UTC))

    async def insert_local_credential(
        self, profile_id: uuid.UUID, password: str
    ) -> None:
        """
        Create the local credential of a profile.

        Args:
            profile_id: Owning profile
            password: Plain text password (hashed here)
        """
        credential = LocalCredential(
            profile_id=profile_id,
            password_hash=hash_password(password),
            hash_algorithm=HASH_ALGORITHM,
            changed_at=datetime.now(UTC),
        )
        with store_errors("insert_local_credential"):
            await self.local_repo.add(credential)

    async def insert_federated_credential(
        self,
        profile_id: uuid.UUID,
        provider: str,
        provider_subject: str,
        email: str,
        provider_username: str | None = None,
    ) -> FederatedCredential:
        """
        Link a verified external identity to a profile.

        Raises:
            ConflictError: If the subject or the profile is already linked
        """
        credential = FederatedCredential(
            profile_id=profile_id,
            provider=provider,
            provider_subject=provider_subject,
            email=email,
            provider_username=provider_username,
        )
        with store_errors("insert_federated_credential"):
            return await self.federated_repo.add(credential)

    async def replace_local_credential_hash(
        self, profile_id: uuid.UUID, new_password: str
    ) -> bool:
        """
        Replace a profile's password hash with a fresh one.

        The previous hash is overwritten in a single statement.

        Returns:
            True if a local credential existed and was replaced
        """
        new_hash = hash_password(new_password)
        with store_errors("replace_local_credential_hash"):
            updated = await self.local_repo.replace_hash(
                profile_id, new_hash, HASH_ALGORITHM
            )
        return updated > 0
