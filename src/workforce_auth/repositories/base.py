"""
Generic repository over one mapped model.

Repositories only flush; committing is the service's decision. Store
errors propagate as SQLAlchemy exceptions and are translated by
``core.database.store_errors`` at the service boundary.
"""

import uuid
from typing import ClassVar, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workforce_auth.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Shared add/get/delete for a single model.

    Subclasses bind the model as a class attribute:

        class ProfileRepository(BaseRepository[Profile]):
            model = Profile
    """

    model: ClassVar[type[Base]]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, instance: ModelType) -> ModelType:
        """Flush a new row and reload server-side defaults."""
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def get_by_id(self, id: uuid.UUID) -> ModelType | None:
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def delete(self, instance: ModelType) -> None:
        """Permanently remove a row. Dependent rows follow the FK rules."""
        await self.session.delete(instance)
        await self.session.flush()
