"""
Purchase service - the multi-table credit debit.

Pre-checks (user, credits, items) fail fast before any write. The same checks
run again inside the debiting transaction against a locked user row, so two
concurrent purchases cannot both spend the same credits.
"""

import json
import logging
from decimal import Decimal

from forumshop.db.models.audit import PurchaseAudit
from forumshop.db.models.item import Item
from forumshop.db.models.purchase import PurchaseTransaction
from forumshop.db.models.user import User
from forumshop.db.repositories.inventory_repository import InventoryRepository
from forumshop.db.repositories.item_repository import ItemRepository
from forumshop.db.repositories.purchase_repository import PurchaseRepository
from forumshop.db.repositories.user_repository import UserRepository
from forumshop.errors import InsufficientCredits, ItemUnavailable, NotFound, PriceMismatch
from forumshop.schemas.purchase import PurchaseRequest, PurchaseResponse
from forumshop.services.audit import MutationEngine, to_jsonable

logger = logging.getLogger(__name__)


def _ids(values) -> str:
    return ", ".join(map(str, values))


class PurchaseService:
    def __init__(
        self,
        purchase_repo: PurchaseRepository,
        user_repo: UserRepository,
        item_repo: ItemRepository,
        inventory_repo: InventoryRepository,
        engine: MutationEngine,
        enforce_catalog_prices: bool = False,
    ):
        self.purchase_repo = purchase_repo
        self.user_repo = user_repo
        self.item_repo = item_repo
        self.inventory_repo = inventory_repo
        self.engine = engine
        self.enforce_catalog_prices = enforce_catalog_prices

    async def _check_user(self, user_id: int, total: Decimal, *, for_update: bool = False) -> User:
        user = await self.user_repo.get_by_external_id(user_id, for_update=for_update)
        if user is None:
            raise NotFound("User not found")
        if user.credits < total:
            logger.warning(
                "User %s has %s credits, purchase needs %s", user_id, user.credits, total
            )
            raise InsufficientCredits()
        return user

    async def _check_items(self, data: PurchaseRequest) -> dict[int, Item]:
        wanted = list(dict.fromkeys(line.item_id for line in data.items))
        items = {item.id: item for item in await self.item_repo.get_by_ids(wanted)}

        missing = [item_id for item_id in wanted if item_id not in items]
        if missing:
            raise NotFound(f"One or more items not found: {_ids(missing)}")
        unavailable = [
            item_id
            for item_id in wanted
            if items[item_id].is_deleted or not items[item_id].is_active
        ]
        if unavailable:
            raise ItemUnavailable(f"Items not available for purchase: {_ids(unavailable)}")

        if self.enforce_catalog_prices:
            for line in data.items:
                if line.price != items[line.item_id].price:
                    raise PriceMismatch(
                        f"Price for item_id {line.item_id} does not match the catalog price"
                    )
        return items

    async def purchase(self, data: PurchaseRequest) -> PurchaseResponse:
        total = data.total
        await self._check_user(data.user_id, total)
        await self._check_items(data)

        async with self.engine.transaction() as session:
            user = await self._check_user(data.user_id, total, for_update=True)
            await self._check_items(data)

            credits_before = user.credits
            credits_after = credits_before - total
            transaction = await self.purchase_repo.add(
                PurchaseTransaction(
                    user_id=user.id,
                    credits_before=credits_before,
                    credits_after=credits_after,
                    total_credits_spent=total,
                )
            )
            for line in data.items:
                await self.purchase_repo.add_line(
                    transaction.id, line.item_id, line.quantity, line.price
                )
                await self.inventory_repo.add_quantity(user.id, line.item_id, line.quantity)

            user.credits = credits_after
            session.add(
                PurchaseAudit(
                    transaction_id=transaction.id,
                    user_id=user.id,
                    credits_before=credits_before,
                    credits_after=credits_after,
                    total_credits_spent=total,
                    items_purchased=json.dumps(
                        [line.model_dump() for line in data.items], default=to_jsonable
                    ),
                )
            )
            await session.flush()
            transaction_id = transaction.id

        logger.info(
            "Purchase %s by user %s: %s credits spent, %s remaining",
            transaction_id,
            data.user_id,
            total,
            credits_after,
        )
        return PurchaseResponse(
            transaction_id=transaction_id,
            credits_spent=float(total),
            credits_remaining=float(credits_after),
            items_purchased=len(data.items),
        )
