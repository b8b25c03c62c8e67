"""
Integration tests for the authorization check and audit log routes.
"""

import uuid
from datetime import UTC, datetime

import pytest
from httpx import AsyncClient

from factories import AUTH_HEADERS, DEPT_1, DEPT_2, ORG_1, make_profile
from workforce_auth.exceptions import NotPermittedError
from workforce_auth.models.audit_log import AuditRecord
from workforce_auth.models.enums import AuditEventType, Role


class TestAuthorizationCheck:
    """Test POST /api/v1/authorization/check."""

    @pytest.mark.asyncio
    async def test_manager_own_department_allowed(
        self, async_client: AsyncClient, login_as
    ):
        login_as(make_profile(Role.MANAGER, ORG_1, DEPT_1))

        response = await async_client.post(
            "/api/v1/authorization/check",
            headers=AUTH_HEADERS,
            json={
                "action": "create_user",
                "organization_id": str(ORG_1),
                "department_id": str(DEPT_1),
            },
        )

        assert response.status_code == 200
        assert response.json() == {"allowed": True, "reason": None}

    @pytest.mark.asyncio
    async def test_manager_other_department_denied(
        self, async_client: AsyncClient, login_as
    ):
        """A denial is a normal response carrying the reason."""
        login_as(make_profile(Role.MANAGER, ORG_1, DEPT_1))

        response = await async_client.post(
            "/api/v1/authorization/check",
            headers=AUTH_HEADERS,
            json={
                "action": "create_user",
                "organization_id": str(ORG_1),
                "department_id": str(DEPT_2),
            },
        )

        assert response.status_code == 200
        assert response.json() == {"allowed": False, "reason": "not_permitted"}

    @pytest.mark.asyncio
    async def test_inactive_profile_denied(self, async_client: AsyncClient, login_as):
        """A live session of a deactivated profile authorizes nothing."""
        login_as(make_profile(Role.ORG_ADMIN, department_id=None, is_active=False))

        response = await async_client.post(
            "/api/v1/authorization/check",
            headers=AUTH_HEADERS,
            json={"action": "read_user", "organization_id": str(ORG_1)},
        )

        assert response.json() == {"allowed": False, "reason": "inactive"}

    @pytest.mark.asyncio
    async def test_unknown_action(self, async_client: AsyncClient, login_as):
        login_as(make_profile())

        response = await async_client.post(
            "/api/v1/authorization/check",
            headers=AUTH_HEADERS,
            json={"action": "launch_missiles"},
        )

        assert response.status_code == 422


class TestAuditLogs:
    """Test GET /api/v1/audit-logs."""

    @pytest.mark.asyncio
    async def test_list_audit_records(
        self, async_client: AsyncClient, audit_service, login_as
    ):
        actor = make_profile(Role.ORG_ADMIN, department_id=None)
        login_as(actor)
        record = AuditRecord(
            id=uuid.uuid4(),
            event_type=AuditEventType.SESSION_LOGIN,
            actor_profile_id=None,
            target_profile_id=None,
            target_organization_id=ORG_1,
            success=False,
            failure_reason="invalid_credentials",
            attempted_identifier="alice",
            ip_address="10.0.0.1",
            user_agent="pytest",
            request_id="req-12345678",
            details=None,
            occurred_at=datetime.now(UTC),
        )
        audit_service.list_visible_records.return_value = ([record], 1)

        response = await async_client.get(
            "/api/v1/audit-logs?success=false&event_type=session.login",
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["meta"]["total"] == 1
        assert body["data"][0]["event_type"] == "session.login"
        assert body["data"][0]["failure_reason"] == "invalid_credentials"
        kwargs = audit_service.list_visible_records.call_args.kwargs
        assert kwargs["success"] is False
        assert kwargs["event_type"] == AuditEventType.SESSION_LOGIN

    @pytest.mark.asyncio
    async def test_employee_cannot_read(
        self, async_client: AsyncClient, audit_service, login_as
    ):
        login_as(make_profile())
        audit_service.list_visible_records.side_effect = NotPermittedError(
            action="read_audit_log"
        )

        response = await async_client.get("/api/v1/audit-logs", headers=AUTH_HEADERS)

        assert response.status_code == 403
