"""
Category service - catalog reads and audited category writes.
Deleting a category cascades to items that have no other category.
"""

import logging

from forumshop.db.repositories.category_repository import CategoryRepository
from forumshop.db.repositories.item_repository import ItemRepository
from forumshop.errors import NotFound
from forumshop.schemas.category import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    CategoryWithItemsResponse,
)
from forumshop.schemas.common import Page, Pagination
from forumshop.services.audit import CATEGORY, ITEM, AuditAction, MutationEngine, soft_delete

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(
        self,
        category_repo: CategoryRepository,
        item_repo: ItemRepository,
        engine: MutationEngine,
    ):
        self.category_repo = category_repo
        self.item_repo = item_repo
        self.engine = engine

    async def get(self, id: int) -> CategoryWithItemsResponse:
        category = await self.category_repo.get_live_with_items(id)
        if category is None:
            raise NotFound("Category not found")
        return CategoryWithItemsResponse.model_validate(category)

    async def list_categories(self, page: int, limit: int) -> Page[CategoryResponse]:
        categories, total = await self.category_repo.get_live_page(
            skip=(page - 1) * limit, limit=limit
        )
        return Page[CategoryResponse](
            items=[CategoryResponse.model_validate(c) for c in categories],
            pagination=Pagination.build(total, page, limit),
        )

    async def create(self, data: CategoryCreate) -> CategoryResponse:
        category = await self.engine.create(
            CATEGORY,
            {
                "name": data.name,
                "image": data.image,
                "is_active": data.is_active,
                "created_by": data.user_id,
                "edited_by": data.user_id,
            },
            actor_id=data.user_id,
        )
        logger.info("Category %s created by user %s", category.id, data.user_id)
        return CategoryResponse.model_validate(category)

    async def update(self, id: int, data: CategoryUpdate) -> CategoryResponse:
        async def change(category):
            category.name = data.name
            category.image = data.image
            category.is_active = data.is_active
            category.edited_by = data.user_id

        category = await self.engine.mutate(CATEGORY, id, change, actor_id=data.user_id)
        logger.info("Category %s updated by user %s", id, data.user_id)
        return CategoryResponse.model_validate(category)

    async def delete(self, id: int, user_id: int) -> CategoryResponse:
        """Soft-delete the category, its sole-category items, and drop its item links atomically."""
        engine = self.engine
        async with engine.transaction() as session:
            category = await engine.load(CATEGORY, id, AuditAction.DELETE)
            old_category = await CATEGORY.capture(session, category)

            orphans = await self.item_repo.get_sole_category_items(id)
            snapshots = [(item, await ITEM.capture(session, item)) for item in orphans]
            await self.category_repo.unlink_items(id)

            for item, old_values in snapshots:
                await engine.apply(
                    ITEM,
                    item,
                    soft_delete(user_id),
                    actor_id=user_id,
                    action=AuditAction.DELETE,
                    old_values=old_values,
                )
            category = await engine.apply(
                CATEGORY,
                category,
                soft_delete(user_id),
                actor_id=user_id,
                action=AuditAction.DELETE,
                old_values=old_category,
            )
        logger.info(
            "Category %s deleted by user %s (%d items cascaded)", id, user_id, len(orphans)
        )
        return CategoryResponse.model_validate(category)
