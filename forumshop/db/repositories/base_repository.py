"""
Base repository - generic data access shared by every aggregate.
Reads use populate_existing so a long-lived session never serves stale rows.
"""

from collections.abc import Iterable
from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from forumshop.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Generic async repository. Subclasses define model-specific methods."""

    def __init__(self, session: AsyncSession, model: type[ModelType]):
        self.session = session
        self.model = model

    async def get_by_id(self, id: int, *, for_update: bool = False) -> ModelType | None:
        """Fetch single entity by primary key. for_update locks the row where the dialect supports it."""
        stmt = (
            select(self.model)
            .where(self.model.id == id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_ids(self, ids: Iterable[int]) -> list[ModelType]:
        ids = list(ids)
        if not ids:
            return []
        result = await self.session.execute(
            select(self.model)
            .where(self.model.id.in_(ids))
            .order_by(self.model.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def count(self, *criteria: Any) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(self.model).where(*criteria)
        )
        return int(result.scalar_one())

    async def add(self, entity: ModelType) -> ModelType:
        """Persist new entity. Caller commits session."""
        self.session.add(entity)
        await self.session.flush()  # Get ID without committing
        await self.session.refresh(entity)
        return entity
