"""
Inventory repository - per-user item quantities and the bag view over them.
"""

from sqlalchemy import delete, select

from forumshop.db.models.inventory import Inventory
from forumshop.db.models.item import Item
from forumshop.db.repositories.base_repository import BaseRepository


class InventoryRepository(BaseRepository[Inventory]):
    def __init__(self, session):
        super().__init__(session, Inventory)

    async def get_row(self, user_pk: int, item_id: int) -> Inventory | None:
        result = await self.session.execute(
            select(Inventory)
            .where(Inventory.user_id == user_pk, Inventory.item_id == item_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def add_quantity(self, user_pk: int, item_id: int, quantity: int) -> Inventory:
        """Upsert: increment an existing row, else start a new one with nothing in the bag."""
        row = await self.get_row(user_pk, item_id)
        if row is None:
            row = Inventory(
                user_id=user_pk, item_id=item_id, total_quantity=quantity, quantity_in_bag=0
            )
            self.session.add(row)
        else:
            row.total_quantity = row.total_quantity + quantity
        await self.session.flush()
        return row

    async def delete_for_user(self, user_pk: int) -> None:
        await self.session.execute(
            delete(Inventory)
            .where(Inventory.user_id == user_pk)
            .execution_options(synchronize_session=False)
        )

    async def get_rows_for_users(
        self, user_pks: list[int], *, bag_only: bool = False
    ) -> list[tuple[Inventory, Item]]:
        """Rows for a batch of users joined with their live items, ordered by item name."""
        if not user_pks:
            return []
        stmt = (
            select(Inventory, Item)
            .join(Item, Item.id == Inventory.item_id)
            .where(Inventory.user_id.in_(user_pks), Item.is_deleted.is_(False))
            .order_by(Inventory.user_id, Item.name, Item.id)
            .execution_options(populate_existing=True)
        )
        if bag_only:
            stmt = stmt.where(Inventory.quantity_in_bag > 0)
        result = await self.session.execute(stmt)
        return [(row.Inventory, row.Item) for row in result.all()]
