"""
Marker row for super administrator seeding.

Seeding runs at most once per database. The row survives deletion of the
seeded profile (admin_profile_id becomes NULL), which is what stops a
restart from silently re-creating a super administrator someone removed.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from workforce_auth.models.base import Base
from workforce_auth.models.mixins import utcnow


class BootstrapState(Base):
    __tablename__ = "bootstrap_state"

    # Unique and forced TRUE: the table can hold a single row
    completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        unique=True,
    )

    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    admin_profile_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )

    __table_args__ = (CheckConstraint("completed = TRUE", name="completed"),)

    def __repr__(self) -> str:
        return f"BootstrapState(completed_at={self.completed_at}, admin={self.admin_profile_id})"
