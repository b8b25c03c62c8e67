"""
User administration API routes.

This module provides REST endpoints for:
- Creating users with a local credential
- Reading and listing users within the caller's scope
- Activating, deactivating and deleting users
- Resetting another user's password
"""

import logging
import uuid

from fastapi import APIRouter, Depends, status

from workforce_auth.api.dependencies import Client, CurrentProfile, UserServiceDep
from workforce_auth.schemas.common import PaginatedResponse, PaginationMeta, PaginationParams
from workforce_auth.schemas.profile import (
    PasswordReset,
    ProfileListItem,
    ProfileResponse,
    UserCreate,
    UserFilterParams,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "",
    response_model=ProfileResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
    description="""
    Create a profile with a username/password credential.

    Callers other than super_admin may only assign roles below their own,
    inside their own organization (org_admin) or department (manager).
    """,
)
async def create_user(
    user_data: UserCreate,
    current_profile: CurrentProfile,
    user_service: UserServiceDep,
    client: Client,
) -> ProfileResponse:
    profile = await user_service.create_user(
        current_profile,
        username=user_data.username,
        display_name=user_data.display_name,
        password=user_data.password,
        role=user_data.role,
        organization_id=user_data.organization_id,
        department_id=user_data.department_id,
        phone=user_data.phone,
        client=client,
    )
    return ProfileResponse.model_validate(profile)


@router.get(
    "",
    response_model=PaginatedResponse[ProfileListItem],
    summary="List users",
)
async def list_users(
    current_profile: CurrentProfile,
    user_service: UserServiceDep,
    pagination: PaginationParams = Depends(),
    filters: UserFilterParams = Depends(),
) -> PaginatedResponse[ProfileListItem]:
    """List users visible to the caller, filtered and paginated."""
    profiles, total = await user_service.list_users(
        current_profile,
        organization_id=filters.organization_id,
        department_id=filters.department_id,
        role=filters.role,
        is_active=filters.is_active,
        offset=pagination.offset,
        limit=pagination.page_size,
    )
    return PaginatedResponse(
        data=[ProfileListItem.model_validate(p) for p in profiles],
        meta=PaginationMeta.build(total, pagination),
    )


@router.get(
    "/me",
    response_model=ProfileResponse,
    summary="Get own profile",
)
async def get_me(current_profile: CurrentProfile) -> ProfileResponse:
    return ProfileResponse.model_validate(current_profile)


@router.get(
    "/{user_id}",
    response_model=ProfileResponse,
    summary="Get a user",
)
async def get_user(
    user_id: uuid.UUID,
    current_profile: CurrentProfile,
    user_service: UserServiceDep,
) -> ProfileResponse:
    profile = await user_service.get_user(current_profile, user_id)
    return ProfileResponse.model_validate(profile)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user",
)
async def delete_user(
    user_id: uuid.UUID,
    current_profile: CurrentProfile,
    user_service: UserServiceDep,
    client: Client,
) -> None:
    await user_service.delete_user(current_profile, user_id, client)


@router.post(
    "/{user_id}/activate",
    response_model=ProfileResponse,
    summary="Activate a user",
)
async def activate_user(
    user_id: uuid.UUID,
    current_profile: CurrentProfile,
    user_service: UserServiceDep,
    client: Client,
) -> ProfileResponse:
    profile = await user_service.set_active(current_profile, user_id, True, client)
    return ProfileResponse.model_validate(profile)


@router.post(
    "/{user_id}/deactivate",
    response_model=ProfileResponse,
    summary="Deactivate a user",
    description="""
    Deactivate a user. Live sessions are not revoked: they keep validating
    until they expire, but every authorization check denies them.
    """,
)
async def deactivate_user(
    user_id: uuid.UUID,
    current_profile: CurrentProfile,
    user_service: UserServiceDep,
    client: Client,
) -> ProfileResponse:
    profile = await user_service.set_active(current_profile, user_id, False, client)
    return ProfileResponse.model_validate(profile)


@router.post(
    "/{user_id}/reset-password",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Reset a user's password",
)
async def reset_password(
    user_id: uuid.UUID,
    reset_data: PasswordReset,
    current_profile: CurrentProfile,
    user_service: UserServiceDep,
    client: Client,
) -> None:
    await user_service.reset_password(
        current_profile, user_id, reset_data.new_password, client
    )
