"""
AuthSession model for issued sessions.

Sessions are identified by the SHA-256 digest of an opaque random token.
The raw token is only ever held by the client.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from workforce_auth.models.base import Base
from workforce_auth.models.enums import SessionKind, enum_values
from workforce_auth.models.mixins import utcnow


class AuthSession(Base):
    """
    Session issued after a successful login.

    Attributes:
        token_hash: SHA-256 hex digest of the session token (unique)
        profile_id: Owning profile
        kind: federated or local; never changes after creation
        issued_at: Creation time
        expires_at: Current expiry; moved forward by refresh
        revoked_at: Tombstone set on logout (NULL while live)
        last_refreshed_at: Time of the last successful refresh
        ip_address: Client address at creation
        user_agent: Client user agent at creation

    A session is live iff revoked_at IS NULL and expires_at > now.
    """

    __tablename__ = "auth_sessions"

    token_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        index=True,
    )

    profile_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    kind: Mapped[SessionKind] = mapped_column(
        Enum(SessionKind, name="session_kind_enum", values_callable=enum_values),
        nullable=False,
    )

    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )

    revoked_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    last_refreshed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    ip_address: Mapped[Optional[str]] = mapped_column(
        String(45),  # IPv6 max length
        nullable=True,
    )

    user_agent: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )

    __table_args__ = (
        Index("ix_auth_sessions_profile_expires", "profile_id", "expires_at"),
    )

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the session is past its expiry at ``now``."""
        return self.expires_at <= (now or utcnow())

    def is_live(self, now: datetime | None = None) -> bool:
        """Check whether the session is neither revoked nor expired."""
        return not self.is_revoked and not self.is_expired(now)

    def __repr__(self) -> str:
        return (
            f"AuthSession(id={self.id}, profile_id={self.profile_id}, "
            f"kind={self.kind}, expires_at={self.expires_at})"
        )
