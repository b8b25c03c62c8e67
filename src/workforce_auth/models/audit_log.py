"""
AuditRecord model for the append-only audit trail.

This module implements immutable audit logging for:
- Session lifecycle events (login, logout, refresh; success and failure)
- Privileged actions (user and organization creation/deletion, activation
  changes, password changes)

Audit records are WRITE-ONCE. The application never updates or deletes
them; retention is an external policy.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from workforce_auth.models.base import Base
from workforce_auth.models.enums import AuditEventType, enum_values
from workforce_auth.models.mixins import utcnow


class AuditRecord(Base):
    """
    Immutable audit trail entry.

    Attributes:
        actor_profile_id: Profile that acted (NULL for failed pre-authentication
            attempts and system actions)
        event_type: What happened
        target_profile_id: Profile affected, if any
        target_organization_id: Organization affected, if any
        success: Whether the event succeeded
        failure_reason: Internal failure cause (e.g. "inactive")
        attempted_identifier: Credential string presented on a failed login
        ip_address: Client address, best effort
        user_agent: Client user agent, best effort
        request_id: Correlation id of the originating request
        details: Additional context as JSONB
        occurred_at: When the event occurred

    Targets are stored without foreign keys so records outlive the rows
    they describe.
    """

    __tablename__ = "audit_records"

    actor_profile_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    event_type: Mapped[AuditEventType] = mapped_column(
        Enum(AuditEventType, name="audit_event_type_enum", values_callable=enum_values),
        nullable=False,
        index=True,
    )

    target_profile_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
        index=True,
    )

    target_organization_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
    )

    success: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    failure_reason: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
    )

    attempted_identifier: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    # Client metadata, never required for correctness
    ip_address: Mapped[Optional[str]] = mapped_column(
        String(45),
        nullable=True,
    )

    user_agent: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )

    request_id: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )

    details: Mapped[Optional[dict[str, Any]]] = mapped_column(
        JSONB,
        nullable=True,
    )

    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )

    __table_args__ = (
        Index("ix_audit_records_actor_occurred", "actor_profile_id", "occurred_at"),
        Index("ix_audit_records_event_occurred", "event_type", "occurred_at"),
        Index(
            "ix_audit_records_target_org_occurred",
            "target_organization_id",
            "occurred_at",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"AuditRecord(id={self.id}, event_type={self.event_type}, "
            f"actor={self.actor_profile_id}, success={self.success})"
        )
