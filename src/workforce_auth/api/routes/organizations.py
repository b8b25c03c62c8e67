"""
Organization and department API routes.

Each endpoint only checks authorization before calling the store.
"""

import uuid

from fastapi import APIRouter, Depends, status

from workforce_auth.api.dependencies import Client, CurrentProfile, OrganizationServiceDep
from workforce_auth.schemas.common import PaginationParams
from workforce_auth.schemas.organization import (
    DepartmentCreate,
    DepartmentResponse,
    OrganizationCreate,
    OrganizationResponse,
)

router = APIRouter(prefix="/organizations", tags=["Organizations"])


@router.post(
    "",
    response_model=OrganizationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an organization",
)
async def create_organization(
    organization_data: OrganizationCreate,
    current_profile: CurrentProfile,
    organization_service: OrganizationServiceDep,
    client: Client,
) -> OrganizationResponse:
    organization = await organization_service.create_organization(
        current_profile, organization_data.name, client
    )
    return OrganizationResponse.model_validate(organization)


@router.get(
    "",
    response_model=list[OrganizationResponse],
    summary="List organizations",
)
async def list_organizations(
    current_profile: CurrentProfile,
    organization_service: OrganizationServiceDep,
    pagination: PaginationParams = Depends(),
) -> list[OrganizationResponse]:
    organizations = await organization_service.list_organizations(
        current_profile, offset=pagination.offset, limit=pagination.page_size
    )
    return [OrganizationResponse.model_validate(o) for o in organizations]


@router.delete(
    "/{organization_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an organization",
    description="Fails with 409 while profiles still belong to the organization.",
)
async def delete_organization(
    organization_id: uuid.UUID,
    current_profile: CurrentProfile,
    organization_service: OrganizationServiceDep,
    client: Client,
) -> None:
    await organization_service.delete_organization(current_profile, organization_id, client)


@router.get(
    "/{organization_id}/departments",
    response_model=list[DepartmentResponse],
    summary="List departments",
)
async def list_departments(
    organization_id: uuid.UUID,
    current_profile: CurrentProfile,
    organization_service: OrganizationServiceDep,
) -> list[DepartmentResponse]:
    departments = await organization_service.list_departments(
        current_profile, organization_id
    )
    return [DepartmentResponse.model_validate(d) for d in departments]


@router.post(
    "/{organization_id}/departments",
    response_model=DepartmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a department",
)
async def create_department(
    organization_id: uuid.UUID,
    department_data: DepartmentCreate,
    current_profile: CurrentProfile,
    organization_service: OrganizationServiceDep,
) -> DepartmentResponse:
    department = await organization_service.create_department(
        current_profile, organization_id, department_data.name
    )
    return DepartmentResponse.model_validate(department)


@router.delete(
    "/{organization_id}/departments/{department_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a department",
)
async def delete_department(
    organization_id: uuid.UUID,
    department_id: uuid.UUID,
    current_profile: CurrentProfile,
    organization_service: OrganizationServiceDep,
) -> None:
    await organization_service.delete_department(
        current_profile, organization_id, department_id
    )
