"""
Item endpoints - read, paginated list (optionally per category), multipart create,
JSON update and soft delete.
"""

from typing import Annotated

from fastapi import APIRouter, Path, Request, status

from forumshop.core.dependencies import ImageUploaderDep, SettingsDep
from forumshop.core.validation import (
    check_query_params,
    form_fields,
    parse_id,
    parse_paging,
    parse_payload,
)
from forumshop.db.repositories.category_repository import CategoryRepository
from forumshop.db.repositories.item_repository import ItemRepository
from forumshop.db.session import DbSession
from forumshop.media.imagekit_client import ITEM_IMAGE, resolve_image
from forumshop.schemas.item import (
    ItemCreate,
    ItemDelete,
    ItemForm,
    ItemMutationResponse,
    ItemUpdate,
)
from forumshop.services.audit import MutationEngine
from forumshop.services.item_service import ItemService

router = APIRouter()

ItemId = Annotated[int, Path(gt=0)]


def _get_item_service(session: DbSession) -> ItemService:
    """Factory for service with repository injection."""
    return ItemService(ItemRepository(session), CategoryRepository(session), MutationEngine(session))


@router.get("")
async def get_items(request: Request, session: DbSession, settings: SettingsDep):
    """GET /items?id=5, /items?category_id=2&page=1&limit=24, or /items?page=2."""
    params = request.query_params
    check_query_params(params.keys(), {"id", "category_id", "page", "limit"})
    svc = _get_item_service(session)
    item_id = parse_id(params.get("id"), "item_id")
    if item_id is not None:
        return await svc.get(item_id)
    category_id = parse_id(params.get("category_id"), "category_id")
    page, limit = parse_paging(
        params.get("page"),
        params.get("limit"),
        default_limit=settings.default_page_size,
        max_limit=settings.max_page_size,
    )
    return await svc.list_items(page, limit, category_id=category_id)


@router.post("", response_model=ItemMutationResponse, status_code=status.HTTP_201_CREATED)
async def add_item(request: Request, session: DbSession, uploader: ImageUploaderDep):
    """Multipart: name, description, price, categories, user_id, image, optional is_active."""
    form = await request.form()
    data = parse_payload(ItemForm, form_fields(form, lists=("categories",)))
    image = await resolve_image(form.get("image"), uploader, kind=ITEM_IMAGE)
    payload = ItemCreate(**data.model_dump(), image=image)
    return await _get_item_service(session).create(payload)


@router.api_route("/{item_id}", methods=["PUT", "PATCH"], response_model=ItemMutationResponse)
async def update_item(session: DbSession, item_id: ItemId, data: ItemUpdate):
    """Full update; categories, when given, replace the item's links."""
    return await _get_item_service(session).update(item_id, data)


@router.delete("/{item_id}", response_model=ItemMutationResponse)
async def delete_item(session: DbSession, item_id: ItemId, data: ItemDelete):
    return await _get_item_service(session).delete(item_id, data.user_id)
