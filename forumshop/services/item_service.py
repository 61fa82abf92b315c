"""
Item service - item reads with their categories and audited item writes.
Controllers stay thin; every write goes through the mutation engine.
"""

import logging

from forumshop.db.models.item import Item
from forumshop.db.repositories.category_repository import CategoryRepository
from forumshop.db.repositories.item_repository import ItemRepository
from forumshop.errors import NotFound
from forumshop.schemas.common import Page, Pagination
from forumshop.schemas.item import (
    ItemCreate,
    ItemMutationResponse,
    ItemResponse,
    ItemUpdate,
    ItemWithCategoriesResponse,
)
from forumshop.services.audit import ITEM, AuditAction, MutationEngine, soft_delete

logger = logging.getLogger(__name__)


def _unique(ids: list[int]) -> list[int]:
    return list(dict.fromkeys(ids))


class ItemService:
    """Handles item use cases: lookup, paging, create, update, soft delete."""

    def __init__(
        self,
        item_repo: ItemRepository,
        category_repo: CategoryRepository,
        engine: MutationEngine,
    ):
        self.item_repo = item_repo
        self.category_repo = category_repo
        self.engine = engine

    async def _to_response(self, item: Item) -> ItemMutationResponse:
        # Item.categories is not loaded here; fetch the link ids explicitly
        category_ids = await self.item_repo.category_ids_for(item.id)
        return ItemMutationResponse(
            **ItemResponse.model_validate(item).model_dump(), categories=category_ids
        )

    async def _check_categories(self, category_ids: list[int]) -> None:
        missing = await self.category_repo.find_missing(category_ids)
        if missing:
            raise NotFound(f"Categories not found: {', '.join(map(str, missing))}")

    async def get(self, id: int) -> ItemWithCategoriesResponse:
        item = await self.item_repo.get_live_with_categories(id)
        if item is None:
            raise NotFound("Item not found")
        return ItemWithCategoriesResponse.model_validate(item)

    async def list_items(
        self, page: int, limit: int, category_id: int | None = None
    ) -> Page[ItemWithCategoriesResponse]:
        if category_id is not None and not await self.category_repo.exists_live(category_id):
            raise NotFound("Category not found")
        items, total = await self.item_repo.get_live_page(
            skip=(page - 1) * limit, limit=limit, category_id=category_id
        )
        return Page[ItemWithCategoriesResponse](
            items=[ItemWithCategoriesResponse.model_validate(i) for i in items],
            pagination=Pagination.build(total, page, limit),
        )

    async def create(self, data: ItemCreate) -> ItemMutationResponse:
        category_ids = _unique(data.categories)
        await self._check_categories(category_ids)

        async def link(item):
            await self.item_repo.link_categories(item.id, category_ids)

        item = await self.engine.create(
            ITEM,
            {
                "name": data.name,
                "description": data.description,
                "price": data.price,
                "image": data.image,
                "is_active": data.is_active,
                "created_by": data.user_id,
                "edited_by": data.user_id,
            },
            actor_id=data.user_id,
            after_insert=link,
        )
        logger.info("Item %s created by user %s", item.id, data.user_id)
        return await self._to_response(item)

    async def update(self, id: int, data: ItemUpdate) -> ItemMutationResponse:
        category_ids = None
        if data.categories is not None:
            category_ids = _unique(data.categories)
            await self._check_categories(category_ids)

        async def change(item):
            item.name = data.name
            item.description = data.description
            item.price = data.price
            item.image = data.image
            item.is_active = data.is_active
            item.edited_by = data.user_id
            if category_ids is not None:
                await self.item_repo.replace_categories(item.id, category_ids)

        item = await self.engine.mutate(ITEM, id, change, actor_id=data.user_id)
        logger.info("Item %s updated by user %s", id, data.user_id)
        return await self._to_response(item)

    async def delete(self, id: int, user_id: int) -> ItemMutationResponse:
        item = await self.engine.mutate(
            ITEM, id, soft_delete(user_id), actor_id=user_id, action=AuditAction.DELETE
        )
        logger.info("Item %s deleted by user %s", id, user_id)
        return await self._to_response(item)
