"""Purchase request/response schemas."""

from decimal import Decimal

from pydantic import BaseModel, Field

from forumshop.schemas.common import EntityId, ForumUserId


class PurchaseLine(BaseModel):
    item_id: EntityId
    quantity: int = Field(gt=0)
    # Client-submitted unit price; see Settings.enforce_catalog_prices
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)


class PurchaseRequest(BaseModel):
    user_id: ForumUserId
    items: list[PurchaseLine] = Field(min_length=1)

    @property
    def total(self) -> Decimal:
        return sum((line.price * line.quantity for line in self.items), Decimal("0"))


class PurchaseResponse(BaseModel):
    transaction_id: int
    credits_spent: float
    credits_remaining: float
    items_purchased: int
