"""
Audit record Pydantic schemas.

This module provides:
- Audit record response schema
- Audit record filter parameters
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from workforce_auth.models.enums import AuditEventType


class AuditRecordResponse(BaseModel):
    """
    Schema for an audit record.

    The attempted identifier of failed logins is included: reading the
    audit trail is itself restricted to administrators.
    """

    id: uuid.UUID
    event_type: AuditEventType
    actor_profile_id: uuid.UUID | None
    target_profile_id: uuid.UUID | None
    target_organization_id: uuid.UUID | None
    success: bool
    failure_reason: str | None
    attempted_identifier: str | None
    ip_address: str | None
    user_agent: str | None
    request_id: str | None
    details: dict[str, Any] | None
    occurred_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuditRecordFilterParams(BaseModel):
    """
    Query filters for audit records.

    Attributes:
        event_type: Filter by event type
        success: Filter by outcome
        organization_id: Filter by target organization
        start_date: Records at or after this time
        end_date: Records at or before this time
    """

    event_type: AuditEventType | None = Field(default=None)
    success: bool | None = Field(default=None)
    organization_id: uuid.UUID | None = Field(default=None)
    start_date: datetime | None = Field(default=None)
    end_date: datetime | None = Field(default=None)
