"""
Authorization check API route.

The console calls this instead of evaluating roles itself.
"""

from fastapi import APIRouter

from workforce_auth.api.dependencies import CurrentProfile
from workforce_auth.schemas.authorization import (
    AuthorizationCheckRequest,
    AuthorizationCheckResponse,
)
from workforce_auth.services.permission_service import PermissionService, ScopeTarget

router = APIRouter(prefix="/authorization", tags=["Authorization"])


@router.post(
    "/check",
    response_model=AuthorizationCheckResponse,
    summary="Check a permission",
    description="""
    Ask whether the current profile may perform an action on a scope target.
    A denial is a normal 200 response with `allowed=false` and a reason.
    """,
)
async def check_permission(
    check: AuthorizationCheckRequest,
    current_profile: CurrentProfile,
) -> AuthorizationCheckResponse:
    decision = PermissionService.authorize(
        current_profile,
        check.action,
        ScopeTarget(
            organization_id=check.organization_id,
            department_id=check.department_id,
            profile_id=check.profile_id,
        ),
    )
    return AuthorizationCheckResponse(allowed=decision.allowed, reason=decision.reason)
