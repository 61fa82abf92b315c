"""
Item repository - item reads with their categories, join-table writes.
Categories are loaded with selectinload so a page of items costs a constant number of queries.
"""

from collections import defaultdict

from sqlalchemy import delete, func, insert, select
from sqlalchemy.orm import selectinload

from forumshop.db.models.category import Category
from forumshop.db.models.item import Item, item_categories
from forumshop.db.repositories.base_repository import BaseRepository


def _live_categories():
    return selectinload(Item.categories.and_(Category.is_deleted.is_(False)))


class ItemRepository(BaseRepository[Item]):
    def __init__(self, session):
        super().__init__(session, Item)

    async def get_live_with_categories(self, id: int) -> Item | None:
        result = await self.session.execute(
            select(Item)
            .where(Item.id == id, Item.is_deleted.is_(False))
            .options(_live_categories())
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_live_page(
        self, *, skip: int, limit: int, category_id: int | None = None
    ) -> tuple[list[Item], int]:
        """Non-deleted items, optionally restricted to one category, with total count."""
        criteria = [Item.is_deleted.is_(False)]
        if category_id is not None:
            criteria.append(
                Item.id.in_(
                    select(item_categories.c.item_id).where(
                        item_categories.c.category_id == category_id
                    )
                )
            )
        total = await self.count(*criteria)
        result = await self.session.execute(
            select(Item)
            .where(*criteria)
            .options(_live_categories())
            .order_by(Item.id)
            .offset(skip)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all()), total

    async def category_ids_for(self, item_id: int) -> list[int]:
        result = await self.session.execute(
            select(item_categories.c.category_id)
            .where(item_categories.c.item_id == item_id)
            .order_by(item_categories.c.category_id)
        )
        return list(result.scalars().all())

    async def link_categories(self, item_id: int, category_ids: list[int]) -> None:
        if not category_ids:
            return
        await self.session.execute(
            insert(item_categories),
            [{"item_id": item_id, "category_id": cid} for cid in category_ids],
        )

    async def replace_categories(self, item_id: int, category_ids: list[int]) -> None:
        await self.session.execute(
            delete(item_categories).where(item_categories.c.item_id == item_id)
        )
        await self.link_categories(item_id, category_ids)

    async def get_sole_category_items(self, category_id: int) -> list[Item]:
        """Live items whose only category link is category_id."""
        linked = select(item_categories.c.item_id).where(
            item_categories.c.category_id == category_id
        )
        sole = (
            select(item_categories.c.item_id)
            .where(item_categories.c.item_id.in_(linked))
            .group_by(item_categories.c.item_id)
            .having(func.count() == 1)
        )
        result = await self.session.execute(
            select(Item)
            .where(Item.id.in_(sole), Item.is_deleted.is_(False))
            .order_by(Item.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def categories_for_items(self, item_ids: list[int]) -> dict[int, list[dict]]:
        """Live categories per item for a whole batch in one query."""
        by_item: dict[int, list[dict]] = defaultdict(list)
        if not item_ids:
            return by_item
        result = await self.session.execute(
            select(item_categories.c.item_id, Category.id, Category.name, Category.image)
            .join(Category, Category.id == item_categories.c.category_id)
            .where(item_categories.c.item_id.in_(item_ids), Category.is_deleted.is_(False))
            .order_by(item_categories.c.item_id, Category.id)
        )
        for item_id, id, name, image in result.all():
            by_item[item_id].append({"id": id, "name": name, "image": image})
        return by_item
