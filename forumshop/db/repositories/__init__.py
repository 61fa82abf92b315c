# Repository pattern: one query class per aggregate

from forumshop.db.repositories.category_repository import CategoryRepository
from forumshop.db.repositories.inventory_repository import InventoryRepository
from forumshop.db.repositories.item_repository import ItemRepository
from forumshop.db.repositories.purchase_repository import PurchaseRepository
from forumshop.db.repositories.user_repository import UserRepository

__all__ = [
    "CategoryRepository",
    "InventoryRepository",
    "ItemRepository",
    "PurchaseRepository",
    "UserRepository",
]
