"""
Audit log API routes.

Read-only access to the audit trail. There is no endpoint to modify or
delete audit records.
"""

from fastapi import APIRouter, Depends

from workforce_auth.api.dependencies import AuditServiceDep, CurrentProfile
from workforce_auth.schemas.audit import AuditRecordFilterParams, AuditRecordResponse
from workforce_auth.schemas.common import PaginatedResponse, PaginationMeta, PaginationParams

router = APIRouter(prefix="/audit-logs", tags=["Audit Logs"])


@router.get(
    "",
    response_model=PaginatedResponse[AuditRecordResponse],
    summary="List audit records",
    description="""
    List audit records, newest first.

    super_admin sees every organization; org_admin sees records targeting
    its own organization.
    """,
)
async def list_audit_records(
    current_profile: CurrentProfile,
    audit_service: AuditServiceDep,
    pagination: PaginationParams = Depends(),
    filters: AuditRecordFilterParams = Depends(),
) -> PaginatedResponse[AuditRecordResponse]:
    records, total = await audit_service.list_visible_records(
        current_profile,
        event_type=filters.event_type,
        organization_id=filters.organization_id,
        success=filters.success,
        start_date=filters.start_date,
        end_date=filters.end_date,
        offset=pagination.offset,
        limit=pagination.page_size,
    )
    return PaginatedResponse(
        data=[AuditRecordResponse.model_validate(r) for r in records],
        meta=PaginationMeta.build(total, pagination),
    )
