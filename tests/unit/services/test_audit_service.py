"""
Unit tests for AuditService.

All tests are fully mocked - no database or external dependencies.
"""

import logging
import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from factories import ORG_1, ORG_2, make_profile
from workforce_auth.exceptions import NotPermittedError
from workforce_auth.models.enums import AuditEventType, Role
from workforce_auth.services.audit_service import (
    AuditEvent,
    AuditService,
    ClientMetadata,
)


@pytest.fixture
def db_session():
    """Session yielded by the audit session factory."""
    session = AsyncMock()
    session.commit = AsyncMock()
    return session


@pytest.fixture
def session_factory(db_session):
    """Factory returning an async context manager around db_session."""
    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=db_session)
    ctx.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=ctx)


@pytest.fixture
def mock_audit_repo():
    return AsyncMock()


@pytest.fixture
def audit_service(session_factory, mock_audit_repo):
    with patch(
        "workforce_auth.services.audit_service.AuditRecordRepository",
        return_value=mock_audit_repo,
    ):
        yield AuditService(session_factory)


class TestRecord:
    """Test the record method."""

    @pytest.mark.asyncio
    async def test_record_persists_in_own_transaction(
        self, audit_service, mock_audit_repo, db_session
    ):
        """Each record is committed in a session of its own."""
        actor = uuid.uuid4()
        event = AuditEvent(
            event_type=AuditEventType.USER_CREATED,
            actor_profile_id=actor,
            target_organization_id=ORG_1,
            client=ClientMetadata(ip_address="10.0.0.9", request_id="req-abcdefgh"),
            details={"role": "employee"},
        )

        await audit_service.record(event)

        stored = mock_audit_repo.add.call_args.args[0]
        assert stored.event_type == AuditEventType.USER_CREATED
        assert stored.actor_profile_id == actor
        assert stored.target_organization_id == ORG_1
        assert stored.success is True
        assert stored.ip_address == "10.0.0.9"
        assert stored.request_id == "req-abcdefgh"
        assert stored.details == {"role": "employee"}
        db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_record_never_raises(self, audit_service, mock_audit_repo, caplog):
        """A failed write is logged at ERROR and swallowed."""
        mock_audit_repo.add.side_effect = OperationalError(
            "INSERT", {}, Exception("disk full")
        )

        with caplog.at_level(logging.ERROR, logger="workforce_auth.services.audit_service"):
            await audit_service.record(
                AuditEvent(event_type=AuditEventType.SESSION_LOGIN, success=False)
            )

        assert any(
            "Failed to persist audit record" in r.getMessage() for r in caplog.records
        )

    @pytest.mark.asyncio
    async def test_record_disabled(self, audit_service, mock_audit_repo, session_factory):
        with patch("workforce_auth.services.audit_service.settings") as mock_settings:
            mock_settings.audit_log_enabled = False
            await audit_service.record(AuditEvent(event_type=AuditEventType.ORG_CREATED))

        session_factory.assert_not_called()
        mock_audit_repo.add.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_log_session_event_sets_actor_and_target(
        self, audit_service, mock_audit_repo
    ):
        profile_id = uuid.uuid4()

        await audit_service.log_session_event(
            AuditEventType.SESSION_LOGOUT,
            profile_id=profile_id,
            client=ClientMetadata(),
            organization_id=ORG_2,
        )

        stored = mock_audit_repo.add.call_args.args[0]
        assert stored.actor_profile_id == profile_id
        assert stored.target_profile_id == profile_id
        assert stored.target_organization_id == ORG_2


class TestListVisibleRecords:
    """Test scoped audit retrieval."""

    @pytest.mark.asyncio
    async def test_org_admin_is_confined_to_own_organization(
        self, audit_service, mock_audit_repo, org_admin
    ):
        mock_audit_repo.list_records.return_value = []
        mock_audit_repo.count_records.return_value = 0

        records, total = await audit_service.list_visible_records(org_admin)

        assert (records, total) == ([], 0)
        kwargs = mock_audit_repo.list_records.call_args.kwargs
        assert kwargs["target_organization_id"] == ORG_1

    @pytest.mark.asyncio
    async def test_org_admin_cannot_read_other_organization(
        self, audit_service, org_admin
    ):
        with pytest.raises(NotPermittedError):
            await audit_service.list_visible_records(org_admin, organization_id=ORG_2)

    @pytest.mark.asyncio
    async def test_super_admin_reads_everything(
        self, audit_service, mock_audit_repo, super_admin
    ):
        mock_audit_repo.list_records.return_value = []
        mock_audit_repo.count_records.return_value = 0

        await audit_service.list_visible_records(super_admin, success=False)

        kwargs = mock_audit_repo.list_records.call_args.kwargs
        assert kwargs["target_organization_id"] is None
        assert kwargs["success"] is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", [Role.MANAGER, Role.EMPLOYEE])
    async def test_lower_roles_cannot_read_audit_log(self, audit_service, role):
        with pytest.raises(NotPermittedError):
            await audit_service.list_visible_records(make_profile(role))
