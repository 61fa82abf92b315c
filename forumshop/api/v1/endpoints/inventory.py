"""
Inventory and bag endpoints - per-user views (lazy registration) and reconciliation.
"""

from fastapi import APIRouter, Request

from forumshop.core.dependencies import SettingsDep
from forumshop.core.validation import check_query_params, parse_id, parse_id_list
from forumshop.db.repositories.inventory_repository import InventoryRepository
from forumshop.db.repositories.item_repository import ItemRepository
from forumshop.db.repositories.user_repository import UserRepository
from forumshop.db.session import DbSession
from forumshop.errors import MissingField, ValidationError
from forumshop.schemas.inventory import InventoryUpdate, InventoryUpdateResponse
from forumshop.services.audit import MutationEngine
from forumshop.services.inventory_service import InventoryService
from forumshop.services.user_service import UserService

router = APIRouter()


def _get_inventory_service(session: DbSession, settings: SettingsDep) -> InventoryService:
    engine = MutationEngine(session)
    users = UserService(UserRepository(session), engine, settings.starting_credits)
    return InventoryService(InventoryRepository(session), ItemRepository(session), users, engine)


def _user_selector(request: Request) -> tuple[int | None, list[int] | None]:
    """Exactly one of ?user_id= or ?user_ids=1,2,3."""
    params = request.query_params
    check_query_params(params.keys(), {"user_id", "user_ids"})
    if "user_id" in params and "user_ids" in params:
        raise ValidationError("Use either user_id or user_ids, not both")
    if params.get("user_ids"):
        return None, parse_id_list(params["user_ids"])
    user_id = parse_id(params.get("user_id"), "user_id")
    if user_id is None:
        raise MissingField(["user_id"])
    return user_id, None


@router.get("/inventory")
async def get_inventory(request: Request, session: DbSession, settings: SettingsDep):
    """One user's {user_id, credits, inventory, bag}, or a map keyed by user id for user_ids."""
    user_id, user_ids = _user_selector(request)
    svc = _get_inventory_service(session, settings)
    if user_ids is not None:
        return await svc.get_inventories(user_ids)
    return await svc.get_inventory(user_id)


@router.post("/inventory", response_model=InventoryUpdateResponse)
async def update_inventory(session: DbSession, settings: SettingsDep, data: InventoryUpdate):
    """Full replace of the user's inventory and bag."""
    return await _get_inventory_service(session, settings).reconcile(data)


@router.get("/bags")
async def get_bags(request: Request, session: DbSession, settings: SettingsDep):
    user_id, user_ids = _user_selector(request)
    svc = _get_inventory_service(session, settings)
    if user_ids is not None:
        return await svc.get_bags(user_ids)
    return await svc.get_bag(user_id)
