"""
Authenticator.

This module provides:
- Credential classification (federated email vs. local username)
- login(): resolve a credential/secret pair to a profile and issue a session
- refresh() / logout(): session lifecycle on behalf of the caller

Both credential kinds end in the same place: a Session issued by the
SessionService and a session.login audit record. Callers only ever see the
generic InvalidCredentialsError (or NoProfileError for an unprovisioned
federated identity); the specific reason goes to the audit trail.
"""

import logging
import uuid
from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.ext.asyncio import AsyncSession

from workforce_auth.core.config import settings
from workforce_auth.core.database import store_errors
from workforce_auth.exceptions import (
    ConflictError,
    InactiveAccountError,
    InvalidCredentialsError,
    NoProfileError,
)
from workforce_auth.models.enums import AuditEventType, FailureReason, SessionKind
from workforce_auth.models.profile import Profile
from workforce_auth.services.audit_service import AuditEvent, AuditService, ClientMetadata
from workforce_auth.services.bootstrap_service import BootstrapService
from workforce_auth.services.credential_store import CredentialStore, LocalVerification
from workforce_auth.services.federated_identity import (
    FederatedIdentity,
    FederatedIdentityVerifier,
)
from workforce_auth.services.session_service import IssuedSession, SessionService

logger = logging.getLogger(__name__)


def classify_credential(credential: str) -> SessionKind:
    """
    Classify a presented credential without touching any store.

    An address of the form local@domain is federated; anything else is a
    local username. Usernames cannot contain '@', so the two never overlap.

    Args:
        credential: Email address or username as typed by the user

    Returns:
        SessionKind.FEDERATED or SessionKind.LOCAL
    """
    if "@" not in credential:
        return SessionKind.LOCAL
    try:
        validate_email(credential, check_deliverability=False)
    except EmailNotValidError:
        return SessionKind.LOCAL
    return SessionKind.FEDERATED


@dataclass(frozen=True)
class LoginResult:
    """Successful login: the issued session and the resolved profile."""

    session: IssuedSession
    profile: Profile


class AuthService:
    """
    Service class for authentication operations.

    This service handles:
    - Local login (username + password)
    - Federated login (email + provider token)
    - Allow-list linking of the seeded super administrator
    - Session refresh and logout

    Store failures surface as ServiceUnavailableError and are not audited as
    login failures.
    """

    def __init__(
        self,
        session: AsyncSession,
        audit_service: AuditService,
        verifier: FederatedIdentityVerifier | None = None,
    ):
        """
        Initialize AuthService.

        Args:
            session: Async database session
            audit_service: Audit trail for session events
            verifier: Identity provider token verifier
        """
        self.session = session
        self.audit_service = audit_service
        self.credential_store = CredentialStore(session)
        self.session_service = SessionService(session, audit_service)
        self.bootstrap_service = BootstrapService(session, audit_service)
        self.verifier = verifier or FederatedIdentityVerifier()

    async def login(
        self,
        credential: str,
        secret: str,
        client: ClientMetadata | None = None,
    ) -> LoginResult:
        """
        Authenticate a credential/secret pair and issue a session.

        For a local credential the secret is the password. For a federated
        credential (an email address) the secret is the access token issued
        by the identity provider.

        Args:
            credential: Username or email address
            secret: Password or provider token
            client: Client metadata for the session and the audit record

        Returns:
            LoginResult with the issued session and the profile

        Raises:
            InvalidCredentialsError: Unknown principal, wrong secret, inactive
                profile or provider error (all rendered identically)
            NoProfileError: Verified federated identity with no profile
            ServiceUnavailableError: If a store cannot be reached

        Example:
            result = await auth_service.login("alice", "S3cure!pass", client)
            token = result.session.token
        """
        client = client or ClientMetadata()
        kind = classify_credential(credential)

        # Known local profile behind a failed attempt, for the audit record
        attempted: Profile | None = None
        try:
            if kind == SessionKind.LOCAL:
                verification = await self.credential_store.verify_local_password(
                    credential, secret
                )
                attempted = verification.profile
                profile = self._check_local(verification)
            else:
                profile = await self._resolve_federated(credential, secret, client)
        except (InvalidCredentialsError, NoProfileError) as e:
            await self._audit_failure(credential, e.reason, client, profile=attempted)
            raise

        if not profile.is_active:
            logger.warning(f"Login failed: profile {profile.id} is inactive")
            await self._audit_failure(
                credential, FailureReason.INACTIVE.value, client, profile=profile
            )
            raise InactiveAccountError()

        await self.credential_store.update_last_login(profile.id)
        issued = await self.session_service.create(profile.id, kind, client)
        with store_errors("commit_login"):
            await self.session.commit()

        logger.info(
            f"Login succeeded: profile={profile.id} kind={kind.value} "
            f"session={issued.session.id}"
        )
        await self.audit_service.log_session_event(
            AuditEventType.SESSION_LOGIN,
            profile_id=profile.id,
            client=client,
            organization_id=profile.organization_id,
            details={"session_id": str(issued.session.id), "kind": kind.value},
        )

        return LoginResult(session=issued, profile=profile)

    @staticmethod
    def _check_local(verification: LocalVerification) -> Profile:
        if verification.profile is None:
            logger.warning("Login failed: no local credential for username")
            raise InvalidCredentialsError()
        if not verification.password_ok:
            logger.warning(
                f"Login failed: invalid password for profile {verification.profile.id}"
            )
            raise InvalidCredentialsError()
        return verification.profile

    async def _resolve_federated(
        self, email: str, token: str, client: ClientMetadata
    ) -> Profile:
        """
        Resolve a verified federated identity to a profile.

        Resolution order: existing link, then the super-admin allow-list
        (which links the identity to the seeded profile), then NoProfile.
        """
        identity = self.verifier.verify(token)
        if identity.email.casefold() != email.casefold():
            logger.warning(
                f"Login failed: provider token email does not match credential "
                f"(provider={identity.provider})"
            )
            raise InvalidCredentialsError(reason=FailureReason.PROVIDER_ERROR.value)

        linked = await self.credential_store.find_federated_credential_by_subject(
            identity.provider, identity.subject
        )
        if linked is not None:
            return linked[1]

        if self._matches_allow_list(identity):
            profile = await self._link_super_admin(identity, client)
            if profile is not None:
                return profile

        logger.warning(
            f"Login failed: no profile for federated subject "
            f"(provider={identity.provider})"
        )
        raise NoProfileError()

    @staticmethod
    def _matches_allow_list(identity: FederatedIdentity) -> bool:
        if identity.email.casefold() == settings.super_admin_email.casefold():
            return True
        return (
            identity.provider_username is not None
            and identity.provider_username == settings.super_admin_provider_username
        )

    async def _link_super_admin(
        self, identity: FederatedIdentity, client: ClientMetadata
    ) -> Profile | None:
        """
        Link an allow-listed identity to the seeded super administrator.

        Returns:
            The super administrator profile, or None if it cannot be linked
            (not seeded and deleted, or already linked to another subject)
        """
        profile = await self.bootstrap_service.ensure_super_admin(client)
        if profile is None:
            logger.error("Allow-listed identity but no super admin profile exists")
            return None

        existing = await self.credential_store.find_federated_credential_by_profile_id(
            profile.id
        )
        if existing is not None:
            logger.warning(
                f"Super admin {profile.id} is already linked to another "
                f"{existing.provider} subject"
            )
            return None

        try:
            async with self.session.begin_nested():
                await self.credential_store.insert_federated_credential(
                    profile.id,
                    provider=identity.provider,
                    provider_subject=identity.subject,
                    email=identity.email,
                    provider_username=identity.provider_username,
                )
        except ConflictError:
            # A concurrent login linked the same subject first
            linked = await self.credential_store.find_federated_credential_by_subject(
                identity.provider, identity.subject
            )
            return linked[1] if linked is not None else None

        logger.info(
            f"Linked {identity.provider} identity to super admin profile {profile.id}"
        )
        return profile

    async def _audit_failure(
        self,
        credential: str,
        reason: str | None,
        client: ClientMetadata,
        profile: Profile | None = None,
    ) -> None:
        await self.audit_service.record(
            AuditEvent(
                event_type=AuditEventType.SESSION_LOGIN,
                success=False,
                target_profile_id=profile.id if profile else None,
                target_organization_id=profile.organization_id if profile else None,
                failure_reason=reason or FailureReason.INVALID_CREDENTIALS.value,
                attempted_identifier=credential,
                client=client,
            )
        )

    async def refresh(
        self,
        token: str,
        client: ClientMetadata | None = None,
        organization_id: uuid.UUID | None = None,
    ):
        """Extend the caller's session. See SessionService.refresh."""
        return await self.session_service.refresh(token, client, organization_id)

    async def logout(
        self,
        token: str,
        client: ClientMetadata | None = None,
        organization_id: uuid.UUID | None = None,
    ) -> None:
        """Revoke the caller's session. Idempotent."""
        await self.session_service.revoke(token, client, organization_id)
