"""
Authorization check schemas.

The console asks the authorization engine whether an action is allowed
instead of branching on roles itself.
"""

import uuid

from pydantic import BaseModel, Field

from workforce_auth.services.permission_service import Action, DenyReason


class AuthorizationCheckRequest(BaseModel):
    """
    Action and scope target to check for the current profile.

    Attributes:
        action: Action identifier
        organization_id: Target organization (omit for self-scoped actions)
        department_id: Target department
        profile_id: Target profile
    """

    action: Action = Field(description="Action to check")
    organization_id: uuid.UUID | None = None
    department_id: uuid.UUID | None = None
    profile_id: uuid.UUID | None = None


class AuthorizationCheckResponse(BaseModel):
    allowed: bool
    reason: DenyReason | None = None
