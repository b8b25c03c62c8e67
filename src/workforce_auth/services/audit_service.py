"""
Audit service for the append-only audit trail.

This module provides:
- record(): best-effort persistence of a single audit event
- Convenience helpers for session lifecycle and privileged-action events
- Audit record retrieval with filtering

Records are written in their own database session and transaction, so an
audit write never joins (or rolls back) the action that triggered it, and a
failed audit write never reaches the caller: it is logged at ERROR level
instead.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from workforce_auth.core.config import settings
from workforce_auth.core.database import store_errors
from workforce_auth.core.rate_limit import client_address
from workforce_auth.models.audit_log import AuditRecord
from workforce_auth.models.enums import AuditEventType
from workforce_auth.models.profile import Profile
from workforce_auth.repositories.audit_repository import AuditRecordRepository
from workforce_auth.services.permission_service import (
    Action,
    PermissionService,
    Scope,
    ScopeTarget,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientMetadata:
    """Best-effort description of the client behind a request."""

    ip_address: str | None = None
    user_agent: str | None = None
    request_id: str | None = None

    @classmethod
    def from_request(cls, request: Request) -> "ClientMetadata":
        return cls(
            ip_address=client_address(request),
            user_agent=request.headers.get("User-Agent"),
            request_id=getattr(request.state, "request_id", None),
        )


@dataclass(frozen=True)
class AuditEvent:
    """A single security-relevant event to append to the trail."""

    event_type: AuditEventType
    success: bool = True
    actor_profile_id: uuid.UUID | None = None
    target_profile_id: uuid.UUID | None = None
    target_organization_id: uuid.UUID | None = None
    failure_reason: str | None = None
    attempted_identifier: str | None = None
    client: ClientMetadata = field(default_factory=ClientMetadata)
    details: dict[str, Any] | None = None


class AuditService:
    """
    Service class for audit trail operations.

    The service holds a session factory rather than a session: each record is
    committed on its own. Audit records are immutable. There is no update or
    delete operation.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """
        Initialize AuditService.

        Args:
            session_factory: Factory for independent database sessions
        """
        self.session_factory = session_factory

    async def record(self, event: AuditEvent) -> None:
        """
        Append an event to the audit trail.

        Never raises: persistence failures are logged with traceback so
        they surface on the operational error channel.

        Args:
            event: Event to record
        """
        if not settings.audit_log_enabled:
            logger.debug(f"Audit disabled, dropping event {event.event_type.value}")
            return

        audit_record = AuditRecord(
            actor_profile_id=event.actor_profile_id,
            event_type=event.event_type,
            target_profile_id=event.target_profile_id,
            target_organization_id=event.target_organization_id,
            success=event.success,
            failure_reason=event.failure_reason,
            attempted_identifier=event.attempted_identifier,
            ip_address=event.client.ip_address,
            user_agent=event.client.user_agent,
            request_id=event.client.request_id,
            details=event.details,
        )

        try:
            async with self.session_factory() as session:
                await AuditRecordRepository(session).add(audit_record)
                await session.commit()
        except Exception:
            # Audit writes must never block the triggering action
            logger.error(
                f"Failed to persist audit record: event={event.event_type.value} "
                f"actor={event.actor_profile_id} success={event.success} "
                f"reason={event.failure_reason}",
                exc_info=True,
                extra={"request_id": event.client.request_id},
            )
            return

        logger.debug(
            f"Audit record created: event={event.event_type.value}, "
            f"actor={event.actor_profile_id}, success={event.success}"
        )

    async def log_session_event(
        self,
        event_type: AuditEventType,
        profile_id: uuid.UUID | None,
        client: ClientMetadata,
        organization_id: uuid.UUID | None = None,
        success: bool = True,
        failure_reason: str | None = None,
        attempted_identifier: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Record a session lifecycle event (login, logout, refresh).

        The profile is both the actor and the target; its organization is
        recorded so organization-scoped audit views include the event.
        """
        await self.record(
            AuditEvent(
                event_type=event_type,
                success=success,
                actor_profile_id=profile_id,
                target_profile_id=profile_id,
                target_organization_id=organization_id,
                failure_reason=failure_reason,
                attempted_identifier=attempted_identifier,
                client=client,
                details=details,
            )
        )

    async def log_action(
        self,
        event_type: AuditEventType,
        actor_profile_id: uuid.UUID | None,
        client: ClientMetadata,
        target_profile_id: uuid.UUID | None = None,
        target_organization_id: uuid.UUID | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Record a successful privileged action."""
        await self.record(
            AuditEvent(
                event_type=event_type,
                actor_profile_id=actor_profile_id,
                target_profile_id=target_profile_id,
                target_organization_id=target_organization_id,
                client=client,
                details=details,
            )
        )

    async def list_records(
        self,
        event_type: AuditEventType | None = None,
        actor_profile_id: uuid.UUID | None = None,
        target_organization_id: uuid.UUID | None = None,
        success: bool | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[AuditRecord], int]:
        """
        Get audit records with filtering and the total matching count.

        Returns:
            Tuple of (records, total)
        """
        filters = dict(
            event_type=event_type,
            actor_profile_id=actor_profile_id,
            target_organization_id=target_organization_id,
            success=success,
            start_date=start_date,
            end_date=end_date,
        )
        with store_errors("list_audit_records"):
            async with self.session_factory() as session:
                repo = AuditRecordRepository(session)
                records = await repo.list_records(**filters, offset=offset, limit=limit)
                total = await repo.count_records(**filters)
        return records, total

    async def list_visible_records(
        self,
        actor: Profile,
        event_type: AuditEventType | None = None,
        organization_id: uuid.UUID | None = None,
        success: bool | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[AuditRecord], int]:
        """
        Get the audit records the actor may read.

        Actors holding read_audit_log only at their own organization are
        restricted to records targeting it.

        Raises:
            NotPermittedError: If the actor may not read the audit log
        """
        scope = PermissionService.broadest_scope(actor.role, Action.READ_AUDIT_LOG)
        if scope == Scope.OWN_ORGANIZATION:
            organization_id = organization_id or actor.organization_id

        PermissionService.require(
            actor,
            Action.READ_AUDIT_LOG,
            ScopeTarget(organization_id=organization_id),
        )

        return await self.list_records(
            event_type=event_type,
            target_organization_id=organization_id,
            success=success,
            start_date=start_date,
            end_date=end_date,
            offset=offset,
            limit=limit,
        )
