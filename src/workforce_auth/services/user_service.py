"""
User administration service.

This module provides:
- Create users (profile + local credential in one transaction)
- Get and list users within the caller's read scope
- Activate / deactivate users
- Delete users
- Change own password and admin password reset

Every operation is checked by PermissionService before touching the
store. Creation, deletion, activity changes and password changes are
audited.
"""

import logging
import re
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from workforce_auth.core.database import store_errors
from workforce_auth.core.security import generate_tracking_id, validate_password_strength
from workforce_auth.exceptions import (
    AlreadyExistsError,
    ConflictError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidInputError,
    NotFoundError,
    NotPermittedError,
    ValidationError,
    WeakPasswordError,
)
from workforce_auth.models.enums import AuditEventType, Role
from workforce_auth.models.profile import Profile
from workforce_auth.repositories.organization_repository import (
    DepartmentRepository,
    OrganizationRepository,
)
from workforce_auth.repositories.profile_repository import ProfileRepository
from workforce_auth.services.audit_service import AuditService, ClientMetadata
from workforce_auth.services.credential_store import CredentialStore
from workforce_auth.services.permission_service import (
    Action,
    PermissionService,
    Scope,
    ScopeTarget,
)

logger = logging.getLogger(__name__)

# No '@', so a username can never be classified as a federated credential
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{3,30}$")


def profile_target(profile: Profile) -> ScopeTarget:
    """Scope target describing an existing profile."""
    return ScopeTarget(
        organization_id=profile.organization_id,
        department_id=profile.department_id,
        profile_id=profile.id,
    )


class UserService:
    """
    Service class for user administration.

    This service handles:
    - User creation with role ceiling and username rules
    - Scoped reads and listings
    - Activity toggles (sessions are left untouched)
    - Deletion with self-deletion protection
    - Password changes

    Role ceiling: an actor other than super_admin may only create or manage
    profiles whose role is strictly below its own.
    """

    def __init__(self, session: AsyncSession, audit_service: AuditService):
        """
        Initialize UserService.

        Args:
            session: Async database session
            audit_service: Audit trail for privileged actions
        """
        self.session = session
        self.profile_repo = ProfileRepository(session)
        self.organization_repo = OrganizationRepository(session)
        self.department_repo = DepartmentRepository(session)
        self.credential_store = CredentialStore(session)
        self.audit_service = audit_service

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _get_profile(self, profile_id: uuid.UUID) -> Profile:
        with store_errors("get_profile"):
            profile = await self.profile_repo.get_by_id(profile_id)
        if profile is None:
            logger.warning(f"Profile {profile_id} not found")
            raise NotFoundError("User")
        return profile

    @staticmethod
    def _check_role_ceiling(actor: Profile, role: Role, action: Action) -> None:
        if actor.role == Role.SUPER_ADMIN:
            return
        if role.rank >= actor.role.rank:
            logger.warning(
                f"Role ceiling: {actor.id} ({actor.role.value}) cannot "
                f"{action.value} a {role.value}"
            )
            raise NotPermittedError(action=action.value)

    @staticmethod
    def _check_password_strength(password: str) -> None:
        is_valid, message = validate_password_strength(password)
        if not is_valid:
            raise WeakPasswordError(message)

    # -------------------------------------------------------------------------
    # Create / read
    # -------------------------------------------------------------------------

    async def create_user(
        self,
        actor: Profile,
        username: str,
        display_name: str,
        password: str,
        role: Role,
        organization_id: uuid.UUID | None = None,
        department_id: uuid.UUID | None = None,
        phone: str | None = None,
        client: ClientMetadata | None = None,
    ) -> Profile:
        """
        Create a profile with a local credential.

        Args:
            actor: Acting profile
            username: Unique username (3-30 chars of letters, digits, '_', '.', '-')
            display_name: Human label
            password: Initial password (must pass the strength policy)
            role: Role of the new profile
            organization_id: Owning organization (required unless super_admin)
            department_id: Owning department, must belong to the organization
            phone: Optional contact number
            client: Client metadata for the audit record

        Returns:
            Created Profile

        Raises:
            NotPermittedError: If the actor may not create users in the target
                scope, or may not assign the role
            ValidationError: If the role requires an organization
            InvalidInputError: If the username or department is invalid
            NotFoundError: If the organization does not exist
            AlreadyExistsError: If the username is taken
            WeakPasswordError: If the password is too weak
        """
        PermissionService.require(
            actor,
            Action.CREATE_USER,
            ScopeTarget(organization_id=organization_id, department_id=department_id),
        )
        self._check_role_ceiling(actor, role, Action.CREATE_USER)

        if role != Role.SUPER_ADMIN and organization_id is None:
            raise ValidationError(
                "An organization is required for this role",
                details={"role": role.value},
            )

        if not USERNAME_PATTERN.match(username):
            raise InvalidInputError(
                field="username",
                message="Username must be 3-30 characters of letters, digits, '_', '.' or '-'",
            )

        with store_errors("create_user_checks"):
            if organization_id is not None:
                if await self.organization_repo.get_by_id(organization_id) is None:
                    raise NotFoundError("Organization")
            if department_id is not None:
                if organization_id is None or (
                    await self.department_repo.get_in_organization(
                        organization_id, department_id
                    )
                    is None
                ):
                    raise InvalidInputError(
                        field="department_id",
                        message="Department does not belong to the organization",
                    )
            if await self.profile_repo.username_exists(username):
                logger.warning(f"User creation attempted with existing username: {username}")
                raise AlreadyExistsError("User with this username")

        self._check_password_strength(password)

        profile = Profile(
            username=username,
            display_name=display_name,
            role=role,
            organization_id=organization_id,
            department_id=department_id,
            phone=phone,
            is_active=True,
            tracking_id=generate_tracking_id(),
            created_by=actor.id,
            updated_by=actor.id,
        )
        with store_errors("create_user"):
            profile = await self.profile_repo.add(profile)
        await self.credential_store.insert_local_credential(profile.id, password)
        with store_errors("create_user"):
            await self.session.commit()

        logger.info(
            f"User created: id={profile.id} username={profile.username} "
            f"role={role.value} by={actor.id}"
        )
        await self.audit_service.log_action(
            AuditEventType.USER_CREATED,
            actor_profile_id=actor.id,
            client=client or ClientMetadata(),
            target_profile_id=profile.id,
            target_organization_id=organization_id,
            details={"username": username, "role": role.value},
        )
        return profile

    async def get_user(self, actor: Profile, profile_id: uuid.UUID) -> Profile:
        """
        Get a profile the actor is allowed to read.

        Raises:
            NotFoundError: If the profile does not exist
            NotPermittedError: If it is outside the actor's read scope
        """
        profile = await self._get_profile(profile_id)
        PermissionService.require(actor, Action.READ_USER, profile_target(profile))
        return profile

    async def list_users(
        self,
        actor: Profile,
        organization_id: uuid.UUID | None = None,
        department_id: uuid.UUID | None = None,
        role: Role | None = None,
        is_active: bool | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Profile], int]:
        """
        List profiles inside the actor's read scope.

        Filters left unset default to the actor's own organization or
        department, depending on the broadest scope at which the actor owns
        read_user. Explicit filters outside that scope are denied.
        An actor limited to its department that belongs to no department
        is denied rather than shown the whole organization.

        Returns:
            Tuple of (profiles, total)
        """
        scope = PermissionService.broadest_scope(actor.role, Action.READ_USER)
        if scope in (Scope.OWN_ORGANIZATION, Scope.OWN_DEPARTMENT):
            organization_id = organization_id or actor.organization_id
        if scope == Scope.OWN_DEPARTMENT:
            department_id = department_id or actor.department_id

        PermissionService.require(
            actor,
            Action.READ_USER,
            ScopeTarget(organization_id=organization_id, department_id=department_id),
        )

        filters = dict(
            organization_id=organization_id,
            department_id=department_id,
            role=role,
            is_active=is_active,
        )
        with store_errors("list_users"):
            profiles = await self.profile_repo.list_profiles(
                **filters, offset=offset, limit=limit
            )
            total = await self.profile_repo.count_profiles(**filters)
        return profiles, total

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def set_active(
        self,
        actor: Profile,
        profile_id: uuid.UUID,
        is_active: bool,
        client: ClientMetadata | None = None,
    ) -> Profile:
        """
        Activate or deactivate a profile.

        Live sessions of a deactivated profile are not revoked; every
        authorization check denies them until they expire.

        Raises:
            NotFoundError: If the profile does not exist
            NotPermittedError: If outside the actor's scope or role ceiling
            ForbiddenError: If the actor tries to deactivate itself
        """
        profile = await self._get_profile(profile_id)
        PermissionService.require(actor, Action.UPDATE_USER, profile_target(profile))
        self._check_role_ceiling(actor, profile.role, Action.UPDATE_USER)

        if profile.id == actor.id and not is_active:
            raise ForbiddenError("You cannot deactivate your own account")

        with store_errors("set_active"):
            await self.profile_repo.set_active(profile.id, is_active, updated_by=actor.id)
            await self.session.commit()
            await self.session.refresh(profile)

        event_type = (
            AuditEventType.USER_ACTIVATED if is_active else AuditEventType.USER_DEACTIVATED
        )
        logger.info(f"User {profile.id} {event_type.value} by {actor.id}")
        await self.audit_service.log_action(
            event_type,
            actor_profile_id=actor.id,
            client=client or ClientMetadata(),
            target_profile_id=profile.id,
            target_organization_id=profile.organization_id,
        )
        return profile

    async def delete_user(
        self,
        actor: Profile,
        profile_id: uuid.UUID,
        client: ClientMetadata | None = None,
    ) -> None:
        """
        Permanently delete a profile with its credentials and sessions.

        Raises:
            NotFoundError: If the profile does not exist
            NotPermittedError: If outside the actor's scope or role ceiling
            ForbiddenError: If the actor tries to delete itself
        """
        profile = await self._get_profile(profile_id)
        PermissionService.require(actor, Action.DELETE_USER, profile_target(profile))
        self._check_role_ceiling(actor, profile.role, Action.DELETE_USER)

        if profile.id == actor.id:
            raise ForbiddenError("You cannot delete your own account")

        username = profile.username
        organization_id = profile.organization_id
        with store_errors("delete_user"):
            await self.profile_repo.delete(profile)
            await self.session.commit()

        logger.info(f"User deleted: id={profile_id} username={username} by={actor.id}")
        await self.audit_service.log_action(
            AuditEventType.USER_DELETED,
            actor_profile_id=actor.id,
            client=client or ClientMetadata(),
            target_profile_id=profile_id,
            target_organization_id=organization_id,
            details={"username": username},
        )

    async def change_own_password(
        self,
        actor: Profile,
        current_password: str,
        new_password: str,
        client: ClientMetadata | None = None,
    ) -> None:
        """
        Change the actor's own password.

        Existing sessions stay valid.

        Raises:
            NotPermittedError: If the actor is inactive
            InvalidCredentialsError: If the current password is incorrect
                (or the profile has no local credential)
            WeakPasswordError: If the new password is too weak
        """
        PermissionService.require(
            actor, Action.CHANGE_OWN_PASSWORD, ScopeTarget(profile_id=actor.id)
        )

        if not await self.credential_store.verify_password_for_profile(
            actor.id, current_password
        ):
            logger.warning(
                f"Password change failed: invalid current password for profile {actor.id}"
            )
            raise InvalidCredentialsError()

        self._check_password_strength(new_password)
        if new_password == current_password:
            raise InvalidInputError(
                field="new_password",
                message="New password must differ from the current password",
            )

        await self.credential_store.replace_local_credential_hash(actor.id, new_password)
        with store_errors("change_own_password"):
            await self.session.commit()

        logger.info(f"Password changed for profile {actor.id}")
        await self.audit_service.log_action(
            AuditEventType.PASSWORD_CHANGED,
            actor_profile_id=actor.id,
            client=client or ClientMetadata(),
            target_profile_id=actor.id,
            target_organization_id=actor.organization_id,
        )

    async def reset_password(
        self,
        actor: Profile,
        profile_id: uuid.UUID,
        new_password: str,
        client: ClientMetadata | None = None,
    ) -> None:
        """
        Replace another profile's password.

        Raises:
            NotFoundError: If the profile does not exist
            NotPermittedError: If outside the actor's scope or role ceiling
            WeakPasswordError: If the new password is too weak
            ConflictError: If the profile has no local credential
        """
        profile = await self._get_profile(profile_id)
        PermissionService.require(actor, Action.UPDATE_USER, profile_target(profile))
        self._check_role_ceiling(actor, profile.role, Action.UPDATE_USER)
        self._check_password_strength(new_password)

        replaced = await self.credential_store.replace_local_credential_hash(
            profile.id, new_password
        )
        if not replaced:
            raise ConflictError("This user has no local credential")
        with store_errors("reset_password"):
            await self.session.commit()

        logger.info(f"Password reset for profile {profile.id} by {actor.id}")
        await self.audit_service.log_action(
            AuditEventType.PASSWORD_CHANGED,
            actor_profile_id=actor.id,
            client=client or ClientMetadata(),
            target_profile_id=profile.id,
            target_organization_id=profile.organization_id,
            details={"reset": True},
        )
