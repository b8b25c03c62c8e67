"""
AuditRecord repository for audit trail operations.

Note: audit records are IMMUTABLE - this repository only supports
insertion and reading, never updates or deletes.
"""

import uuid
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from workforce_auth.models.audit_log import AuditRecord
from workforce_auth.models.enums import AuditEventType


class AuditRecordRepository:
    """
    Repository for AuditRecord model operations.

    This repository does NOT extend BaseRepository because audit records
    are immutable. Only add() and read operations are supported.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, instance: AuditRecord) -> AuditRecord:
        """
        Persist a new audit record.

        This is the ONLY write operation on the audit trail.
        """
        self.session.add(instance)
        await self.session.flush()
        return instance

    async def list_records(
        self,
        event_type: AuditEventType | None = None,
        actor_profile_id: uuid.UUID | None = None,
        target_organization_id: uuid.UUID | None = None,
        success: bool | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        offset: int = 0,
        limit: int = 100,
    ) -> list[AuditRecord]:
        """
        Get audit records with filtering, newest first.

        Args:
            event_type: Filter by event type
            actor_profile_id: Filter by acting profile
            target_organization_id: Filter by affected organization
            success: Filter by outcome
            start_date: Records at or after this time
            end_date: Records at or before this time
            offset: Number of records to skip (pagination)
            limit: Maximum number of records to return

        Returns:
            List of AuditRecord instances
        """
        query = self._apply_filters(
            select(AuditRecord),
            event_type,
            actor_profile_id,
            target_organization_id,
            success,
            start_date,
            end_date,
        )
        query = query.order_by(AuditRecord.occurred_at.desc()).offset(offset).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_records(
        self,
        event_type: AuditEventType | None = None,
        actor_profile_id: uuid.UUID | None = None,
        target_organization_id: uuid.UUID | None = None,
        success: bool | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> int:
        """Count audit records matching the same filters as list_records."""
        query = self._apply_filters(
            select(func.count()).select_from(AuditRecord),
            event_type,
            actor_profile_id,
            target_organization_id,
            success,
            start_date,
            end_date,
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    @staticmethod
    def _apply_filters(
        query,
        event_type,
        actor_profile_id,
        target_organization_id,
        success,
        start_date,
        end_date,
    ):
        if event_type is not None:
            query = query.where(AuditRecord.event_type == event_type)
        if actor_profile_id is not None:
            query = query.where(AuditRecord.actor_profile_id == actor_profile_id)
        if target_organization_id is not None:
            query = query.where(
                AuditRecord.target_organization_id == target_organization_id
            )
        if success is not None:
            query = query.where(AuditRecord.success == success)
        if start_date is not None:
            query = query.where(AuditRecord.occurred_at >= start_date)
        if end_date is not None:
            query = query.where(AuditRecord.occurred_at <= end_date)
        return query
