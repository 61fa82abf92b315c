"""Inventory and bag schemas - reconciliation payload and read views."""

from pydantic import BaseModel, Field

from forumshop.schemas.common import EntityId, ForumUserId
from forumshop.schemas.item import CategoryRef


class InventoryLine(BaseModel):
    item_id: EntityId
    quantity: int = Field(ge=0)


class InventoryUpdate(BaseModel):
    """Full replacement of a user's inventory and bag."""

    user_id: ForumUserId
    inventory: list[InventoryLine]
    bag: list[InventoryLine]


class InventoryUpdateResponse(BaseModel):
    message: str = "Inventory and bag updated successfully"
    user_id: int
    items: int


class InventoryEntry(BaseModel):
    id: int
    name: str
    description: str
    price: float
    image: str
    total_quantity: int
    quantity_in_bag: int
    categories: list[CategoryRef] = []


class BagEntry(BaseModel):
    id: int
    name: str
    description: str
    price: float
    image: str
    quantity: int
    categories: list[CategoryRef] = []


class UserInventoryResponse(BaseModel):
    user_id: int
    credits: float
    inventory: list[InventoryEntry]
    bag: list[InventoryEntry]


class UserBagResponse(BaseModel):
    user_id: int
    credits: float
    bag: list[BagEntry]
