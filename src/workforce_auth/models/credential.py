"""
Credential models.

A Profile owns zero-or-one LocalCredential and zero-or-one
FederatedCredential. Neither row is ever exposed outside the credential
store.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from workforce_auth.core.security import HASH_ALGORITHM
from workforce_auth.models.base import Base
from workforce_auth.models.mixins import TimestampMixin, utcnow


class LocalCredential(Base):
    """
    Username/password credential.

    The password hash is an encoded Argon2id string that embeds its own
    random salt and cost parameters. It is replaced, never edited, when the
    password changes.

    Attributes:
        profile_id: Owning profile (1:1)
        password_hash: Argon2id hash
        hash_algorithm: Algorithm tag used for rotation
        changed_at: When the current hash was written
    """

    __tablename__ = "local_credentials"

    profile_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    hash_algorithm: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=HASH_ALGORITHM,
    )

    changed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    def __repr__(self) -> str:
        # Never include the hash
        return f"LocalCredential(id={self.id}, profile_id={self.profile_id})"


class FederatedCredential(Base, TimestampMixin):
    """
    Link between an external identity provider subject and a profile.

    Attributes:
        profile_id: Owning profile (1:1 once linked)
        provider: Identity provider name (e.g. "github")
        provider_subject: Stable subject id issued by the provider
        email: Email asserted by the provider at link time
        provider_username: Provider login handle, if any
    """

    __tablename__ = "federated_credentials"

    profile_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    provider: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    provider_subject: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )

    provider_username: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    __table_args__ = (
        UniqueConstraint(
            "provider",
            "provider_subject",
            name="uq_federated_credentials_provider_subject",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"FederatedCredential(id={self.id}, provider={self.provider}, "
            f"profile_id={self.profile_id})"
        )
