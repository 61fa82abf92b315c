"""
Purchase endpoint - spend credits on a cart of items.
"""

from fastapi import APIRouter

from forumshop.core.dependencies import SettingsDep
from forumshop.db.repositories.inventory_repository import InventoryRepository
from forumshop.db.repositories.item_repository import ItemRepository
from forumshop.db.repositories.purchase_repository import PurchaseRepository
from forumshop.db.repositories.user_repository import UserRepository
from forumshop.db.session import DbSession
from forumshop.schemas.purchase import PurchaseRequest, PurchaseResponse
from forumshop.services.audit import MutationEngine
from forumshop.services.purchase_service import PurchaseService

router = APIRouter()


def _get_purchase_service(session: DbSession, settings: SettingsDep) -> PurchaseService:
    return PurchaseService(
        PurchaseRepository(session),
        UserRepository(session),
        ItemRepository(session),
        InventoryRepository(session),
        MutationEngine(session),
        enforce_catalog_prices=settings.enforce_catalog_prices,
    )


@router.post("", response_model=PurchaseResponse)
async def purchase(session: DbSession, settings: SettingsDep, data: PurchaseRequest):
    return await _get_purchase_service(session, settings).purchase(data)
