"""
Category repository - live (non-deleted) reads and join-table maintenance.
"""

from sqlalchemy import delete, select
from sqlalchemy.orm import selectinload

from forumshop.db.models.category import Category
from forumshop.db.models.item import Item, item_categories
from forumshop.db.repositories.base_repository import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    def __init__(self, session):
        super().__init__(session, Category)

    async def get_live_with_items(self, id: int) -> Category | None:
        """Category plus its non-deleted items, two queries total."""
        result = await self.session.execute(
            select(Category)
            .where(Category.id == id, Category.is_deleted.is_(False))
            .options(selectinload(Category.items.and_(Item.is_deleted.is_(False))))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_live_page(self, *, skip: int, limit: int) -> tuple[list[Category], int]:
        live = Category.is_deleted.is_(False)
        total = await self.count(live)
        result = await self.session.execute(
            select(Category)
            .where(live)
            .order_by(Category.id)
            .offset(skip)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all()), total

    async def exists_live(self, id: int) -> bool:
        result = await self.session.execute(
            select(Category.id).where(Category.id == id, Category.is_deleted.is_(False))
        )
        return result.scalar_one_or_none() is not None

    async def find_missing(self, ids: list[int]) -> list[int]:
        """Ids from the list that do not name a live category, in request order."""
        result = await self.session.execute(
            select(Category.id).where(Category.id.in_(ids), Category.is_deleted.is_(False))
        )
        found = set(result.scalars().all())
        return [id for id in ids if id not in found]

    async def unlink_items(self, category_id: int) -> None:
        await self.session.execute(
            delete(item_categories).where(item_categories.c.category_id == category_id)
        )
