"""
Profile model: the authoritative principal record.

A Profile carries everything the authorization engine needs (role,
organization, department, activity flag) and nothing about how the
principal authenticates. Credentials are separate owned records
(see models/credential.py).
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Enum, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from workforce_auth.core.security import generate_tracking_id
from workforce_auth.models.base import Base
from workforce_auth.models.enums import Role, enum_values
from workforce_auth.models.mixins import AuditFieldsMixin, TimestampMixin


class Profile(Base, TimestampMixin, AuditFieldsMixin):
    """
    Principal profile.

    Attributes:
        id: UUID primary key, immutable
        username: Unique handle (case-sensitive). Local credentials log in with it.
        display_name: Human label
        role: Role tier
        organization_id: Owning organization (NULL only for super_admin)
        department_id: Owning department (optional)
        is_active: Deactivated profiles are denied every authorization check
        tracking_id: Support/audit correlation id, assigned once, never reused
        phone: Optional contact number
        last_login_at: Timestamp of the last successful login
        created_at / updated_at: Row timestamps
        created_by / updated_by: Acting profiles

    Constraints:
        - role = 'super_admin' OR organization_id IS NOT NULL
    """

    __tablename__ = "profiles"

    username: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        index=True,
    )

    display_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    role: Mapped[Role] = mapped_column(
        Enum(Role, name="role_enum", values_callable=enum_values),
        nullable=False,
        index=True,
    )

    organization_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("organizations.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )

    department_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("departments.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    tracking_id: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        unique=True,
        default=generate_tracking_id,
    )

    phone: Mapped[Optional[str]] = mapped_column(
        String(32),
        nullable=True,
    )

    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        CheckConstraint(
            "role = 'super_admin' OR organization_id IS NOT NULL",
            name="organization_required",
        ),
    )

    @property
    def is_super_admin(self) -> bool:
        return self.role == Role.SUPER_ADMIN

    def __repr__(self) -> str:
        return f"Profile(id={self.id}, username={self.username}, role={self.role})"
