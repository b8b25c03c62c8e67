"""
Organization and Department models.

Organizations are the tenant boundary below super_admin. Departments
subdivide an organization and scope manager/employee permissions.
"""

import uuid

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from workforce_auth.models.base import Base
from workforce_auth.models.mixins import AuditFieldsMixin, TimestampMixin


class Organization(Base, TimestampMixin, AuditFieldsMixin):
    """
    Tenant organization.

    Attributes:
        id: UUID primary key
        name: Unique display name
    """

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )

    def __repr__(self) -> str:
        return f"Organization(id={self.id}, name={self.name})"


class Department(Base, TimestampMixin, AuditFieldsMixin):
    """
    Department within an organization.

    Attributes:
        id: UUID primary key
        organization_id: Owning organization (departments are removed with it)
        name: Name, unique within the organization
    """

    __tablename__ = "departments"

    organization_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("organization_id", "name", name="uq_departments_organization_name"),
    )

    def __repr__(self) -> str:
        return (
            f"Department(id={self.id}, organization_id={self.organization_id}, "
            f"name={self.name})"
        )
