from forumshop.db.models.audit import CategoryAudit, ItemAudit, PurchaseAudit, UserAudit
from forumshop.db.models.category import Category
from forumshop.db.models.inventory import Inventory
from forumshop.db.models.item import Item, item_categories
from forumshop.db.models.purchase import PurchaseItem, PurchaseTransaction
from forumshop.db.models.user import User

__all__ = [
    "Category",
    "CategoryAudit",
    "Inventory",
    "Item",
    "ItemAudit",
    "PurchaseAudit",
    "PurchaseItem",
    "PurchaseTransaction",
    "User",
    "UserAudit",
    "item_categories",
]
