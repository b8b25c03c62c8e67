"""
Session manager.

This module provides:
- create(): issue an opaque session token for a profile
- validate(): resolve a token to a live session or None
- refresh(): extend a live session (never revives an expired one)
- revoke(): idempotent logout
- sweep_expired(): delete sessions past their expiry

Federated and local sessions are handled identically; ``kind`` is recorded
for audit and display only and never changes after creation.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from workforce_auth.core.config import settings
from workforce_auth.core.database import store_errors
from workforce_auth.core.security import generate_session_token, hash_session_token
from workforce_auth.exceptions import SessionExpiredError, SessionNotFoundError
from workforce_auth.models.enums import AuditEventType, FailureReason, SessionKind
from workforce_auth.models.session import AuthSession
from workforce_auth.repositories.session_repository import SessionRepository
from workforce_auth.services.audit_service import AuditService, ClientMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedSession:
    """A freshly created session together with its raw token."""

    token: str
    session: AuthSession

    @property
    def profile_id(self) -> uuid.UUID:
        return self.session.profile_id

    @property
    def kind(self) -> SessionKind:
        return self.session.kind

    @property
    def expires_at(self) -> datetime:
        return self.session.expires_at


class SessionService:
    """
    Service class for session lifecycle operations.

    Tokens are 256-bit random values. Only their SHA-256 digest is stored.
    Every state change is a single conditional UPDATE, so a revoke racing a
    refresh always leaves the session revoked.
    """

    def __init__(self, session: AsyncSession, audit_service: AuditService):
        """
        Initialize SessionService.

        Args:
            session: Async database session
            audit_service: Audit trail for refresh and logout events
        """
        self.session = session
        self.session_repo = SessionRepository(session)
        self.audit_service = audit_service

    async def create(
        self,
        profile_id: uuid.UUID,
        kind: SessionKind,
        client: ClientMetadata | None = None,
    ) -> IssuedSession:
        """
        Issue a new session.

        The caller owns the surrounding transaction and commits it.

        Args:
            profile_id: Owning profile
            kind: Credential origin (federated or local)
            client: Client metadata stored on the session

        Returns:
            IssuedSession with the raw token (shown to the client once)
        """
        client = client or ClientMetadata()
        now = datetime.now(UTC)
        token = generate_session_token()
        auth_session = AuthSession(
            token_hash=hash_session_token(token),
            profile_id=profile_id,
            kind=kind,
            issued_at=now,
            expires_at=now + settings.session_ttl,
            ip_address=client.ip_address,
            user_agent=client.user_agent,
        )

        with store_errors("create_session"):
            auth_session = await self.session_repo.add(auth_session)

        logger.info(
            f"Session created: id={auth_session.id} profile={profile_id} kind={kind.value}"
        )
        return IssuedSession(token=token, session=auth_session)

    async def authenticate_token(self, token: str) -> AuthSession:
        """
        Resolve a token to its live session.

        Raises:
            SessionNotFoundError: If the token is unknown or revoked
            SessionExpiredError: If the token is known but past its expiry
        """
        with store_errors("find_session"):
            auth_session = await self.session_repo.get_by_token_hash(
                hash_session_token(token)
            )

        if auth_session is None or auth_session.is_revoked:
            raise SessionNotFoundError()

        if auth_session.is_expired(datetime.now(UTC)):
            raise SessionExpiredError()

        return auth_session

    async def validate(self, token: str) -> AuthSession | None:
        """
        Resolve a token to its live session.

        Returns:
            The session, or None if the token is unknown, revoked or expired
        """
        try:
            return await self.authenticate_token(token)
        except (SessionNotFoundError, SessionExpiredError):
            return None

    async def refresh(
        self,
        token: str,
        client: ClientMetadata | None = None,
        organization_id: uuid.UUID | None = None,
    ) -> AuthSession:
        """
        Extend a live session by the configured TTL.

        The token is kept; the previous expiry is replaced. A session that is
        unknown, revoked or already expired is never revived.

        Args:
            token: Session token
            client: Client metadata for the audit record
            organization_id: Organization of the owning profile, for the audit
                record. Looked up from the session when omitted.

        Returns:
            The refreshed session

        Raises:
            SessionNotFoundError: If the session cannot be refreshed
        """
        client = client or ClientMetadata()
        now = datetime.now(UTC)

        with store_errors("refresh_session"):
            refreshed = await self.session_repo.extend_if_live(
                hash_session_token(token),
                now=now,
                expires_at=now + settings.session_ttl,
            )
            if refreshed is not None and organization_id is None:
                organization_id = await self.session_repo.get_profile_organization_id(
                    refreshed.profile_id
                )
            await self.session.commit()

        if refreshed is None:
            logger.warning("Session refresh rejected: unknown, revoked or expired token")
            await self.audit_service.log_session_event(
                AuditEventType.SESSION_REFRESH,
                profile_id=None,
                client=client,
                success=False,
                failure_reason=FailureReason.SESSION_NOT_FOUND.value,
            )
            raise SessionNotFoundError()

        await self.audit_service.log_session_event(
            AuditEventType.SESSION_REFRESH,
            profile_id=refreshed.profile_id,
            client=client,
            organization_id=organization_id,
            details={"session_id": str(refreshed.id), "kind": refreshed.kind.value},
        )
        logger.info(f"Session refreshed: id={refreshed.id} profile={refreshed.profile_id}")
        return refreshed

    async def revoke(
        self,
        token: str,
        client: ClientMetadata | None = None,
        organization_id: uuid.UUID | None = None,
    ) -> None:
        """
        Revoke a session (logout).

        Idempotent: revoking an unknown or already revoked token is a no-op
        and produces no audit record.
        """
        client = client or ClientMetadata()

        with store_errors("revoke_session"):
            revoked = await self.session_repo.revoke(
                hash_session_token(token), datetime.now(UTC)
            )
            if revoked is not None and organization_id is None:
                organization_id = await self.session_repo.get_profile_organization_id(
                    revoked.profile_id
                )
            await self.session.commit()

        if revoked is None:
            logger.debug("Revoke ignored: session unknown or already revoked")
            return

        await self.audit_service.log_session_event(
            AuditEventType.SESSION_LOGOUT,
            profile_id=revoked.profile_id,
            client=client,
            organization_id=organization_id,
            details={"session_id": str(revoked.id), "kind": revoked.kind.value},
        )
        logger.info(f"Session revoked: id={revoked.id} profile={revoked.profile_id}")

    async def list_live_sessions(self, profile_id: uuid.UUID) -> list[AuthSession]:
        with store_errors("list_sessions"):
            return await self.session_repo.list_live_for_profile(
                profile_id, datetime.now(UTC)
            )

    async def sweep_expired(self) -> int:
        """
        Delete every session whose expiry has passed.

        Returns:
            Number of sessions deleted
        """
        with store_errors("sweep_sessions"):
            deleted = await self.session_repo.delete_expired(datetime.now(UTC))
            await self.session.commit()

        if deleted:
            logger.info(f"Swept {deleted} expired sessions")
        return deleted
