"""
Inventory service - per-user inventory and bag views, and full-replace reconciliation.
Reads register unknown users on first access, then fetch a whole batch in a
fixed number of queries: users, inventory rows joined with items, categories.
"""

import logging

from forumshop.db.models.inventory import Inventory
from forumshop.db.models.user import User
from forumshop.db.repositories.inventory_repository import InventoryRepository
from forumshop.db.repositories.item_repository import ItemRepository
from forumshop.errors import DuplicateEntry, InventoryInvariant, NotFound
from forumshop.schemas.inventory import (
    BagEntry,
    InventoryEntry,
    InventoryLine,
    InventoryUpdate,
    InventoryUpdateResponse,
    UserBagResponse,
    UserInventoryResponse,
)
from forumshop.services.audit import MutationEngine
from forumshop.services.user_service import UserService

logger = logging.getLogger(__name__)


def _check_unique(lines: list[InventoryLine], field: str) -> None:
    seen: set[int] = set()
    for index, line in enumerate(lines):
        if line.item_id in seen:
            raise DuplicateEntry(f"Duplicate item_id {line.item_id} in '{field}' at position {index}")
        seen.add(line.item_id)


class InventoryService:
    def __init__(
        self,
        inventory_repo: InventoryRepository,
        item_repo: ItemRepository,
        user_service: UserService,
        engine: MutationEngine,
    ):
        self.inventory_repo = inventory_repo
        self.item_repo = item_repo
        self.user_service = user_service
        self.engine = engine

    async def _load(self, user_ids: list[int], *, bag_only: bool):
        users = await self.user_service.ensure_registered(user_ids)
        rows = await self.inventory_repo.get_rows_for_users(
            [user.id for user in users.values()], bag_only=bag_only
        )
        categories = await self.item_repo.categories_for_items(
            list({item.id for _, item in rows})
        )
        by_user: dict[int, list] = {user.id: [] for user in users.values()}
        for inventory, item in rows:
            by_user[inventory.user_id].append((inventory, item))
        return users, by_user, categories

    async def get_inventories(self, user_ids: list[int]) -> dict[int, UserInventoryResponse]:
        users, by_user, categories = await self._load(user_ids, bag_only=False)
        result = {}
        for uid in user_ids:
            user: User = users[uid]
            entries = [
                InventoryEntry(
                    id=item.id,
                    name=item.name,
                    description=item.description,
                    price=float(item.price),
                    image=item.image,
                    total_quantity=inventory.total_quantity,
                    quantity_in_bag=inventory.quantity_in_bag,
                    categories=categories.get(item.id, []),
                )
                for inventory, item in by_user[user.id]
            ]
            result[uid] = UserInventoryResponse(
                user_id=uid,
                credits=float(user.credits),
                inventory=entries,
                bag=[entry for entry in entries if entry.quantity_in_bag > 0],
            )
        return result

    async def get_inventory(self, user_id: int) -> UserInventoryResponse:
        return (await self.get_inventories([user_id]))[user_id]

    async def get_bags(self, user_ids: list[int]) -> dict[int, UserBagResponse]:
        users, by_user, categories = await self._load(user_ids, bag_only=True)
        result = {}
        for uid in user_ids:
            user: User = users[uid]
            result[uid] = UserBagResponse(
                user_id=uid,
                credits=float(user.credits),
                bag=[
                    BagEntry(
                        id=item.id,
                        name=item.name,
                        description=item.description,
                        price=float(item.price),
                        image=item.image,
                        quantity=inventory.quantity_in_bag,
                        categories=categories.get(item.id, []),
                    )
                    for inventory, item in by_user[user.id]
                ],
            )
        return result

    async def get_bag(self, user_id: int) -> UserBagResponse:
        return (await self.get_bags([user_id]))[user_id]

    async def reconcile(self, data: InventoryUpdate) -> InventoryUpdateResponse:
        """Replace the user's whole inventory and bag; any invalid entry rejects all of it."""
        _check_unique(data.inventory, "inventory")
        _check_unique(data.bag, "bag")
        user = (await self.user_service.ensure_registered([data.user_id]))[data.user_id]

        bag = {line.item_id: line.quantity for line in data.bag}
        totals = {line.item_id: line.quantity for line in data.inventory}

        async with self.engine.transaction() as session:
            referenced = list(dict.fromkeys([*totals, *bag]))
            live = {
                item.id
                for item in await self.item_repo.get_by_ids(referenced)
                if not item.is_deleted
            }
            missing = [item_id for item_id in referenced if item_id not in live]
            if missing:
                raise NotFound(f"Items not found: {', '.join(map(str, missing))}")
            for item_id, in_bag in bag.items():
                if in_bag > 0 and item_id not in totals:
                    raise InventoryInvariant(
                        f"Bag quantity ({in_bag}) exceeds total quantity (0) for item_id {item_id}"
                    )

            await self.inventory_repo.delete_for_user(user.id)
            for item_id, total in totals.items():
                in_bag = bag.get(item_id, 0)
                if in_bag > total:
                    raise InventoryInvariant(
                        f"Bag quantity ({in_bag}) exceeds total quantity ({total}) "
                        f"for item_id {item_id}"
                    )
                session.add(
                    Inventory(
                        user_id=user.id,
                        item_id=item_id,
                        total_quantity=total,
                        quantity_in_bag=in_bag,
                    )
                )
            await session.flush()

        logger.info("Inventory for user %s replaced with %d items", data.user_id, len(totals))
        return InventoryUpdateResponse(user_id=data.user_id, items=len(totals))
