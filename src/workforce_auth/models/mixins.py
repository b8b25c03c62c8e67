"""
Column mixins shared by the directory models.

Timestamps are set by the application (UTC) and by the database as a
fallback, so rows written by migrations or manual SQL still get them.
"""

import uuid
from datetime import UTC, datetime
from typing import Optional

from sqlalchemy import DateTime, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(UTC)


class TimestampMixin:
    """created_at (indexed, immutable) and updated_at (bumped on every UPDATE)."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        index=True,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )


class AuditFieldsMixin:
    """
    Acting profile of the last create/update.

    NULL means the system acted (bootstrap seeding, federated linking).
    No foreign key: the acting profile may be deleted later.
    """

    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
    )

    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
    )
