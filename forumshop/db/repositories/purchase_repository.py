"""
Purchase repository - ledger rows for completed purchases.
"""

from sqlalchemy import select

from forumshop.db.models.purchase import PurchaseItem, PurchaseTransaction
from forumshop.db.repositories.base_repository import BaseRepository


class PurchaseRepository(BaseRepository[PurchaseTransaction]):
    def __init__(self, session):
        super().__init__(session, PurchaseTransaction)

    async def add_line(self, transaction_id: int, item_id: int, quantity: int, price) -> PurchaseItem:
        line = PurchaseItem(
            transaction_id=transaction_id, item_id=item_id, quantity=quantity, item_price=price
        )
        self.session.add(line)
        await self.session.flush()
        return line

    async def get_lines(self, transaction_id: int) -> list[PurchaseItem]:
        result = await self.session.execute(
            select(PurchaseItem)
            .where(PurchaseItem.transaction_id == transaction_id)
            .order_by(PurchaseItem.id)
        )
        return list(result.scalars().all())
