"""
Category endpoints - read, paginated list, multipart create, JSON update and soft delete.
Thin controllers; CategoryService holds the business rules.
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
from forumshop.media.imagekit_client import CATEGORY_IMAGE, resolve_image
from forumshop.schemas.category import (
    CategoryCreate,
    CategoryDelete,
    CategoryForm,
    CategoryResponse,
    CategoryUpdate,
)
from forumshop.services.audit import MutationEngine
from forumshop.services.category_service import CategoryService

router = APIRouter()

CategoryId = Annotated[int, Path(gt=0)]


def _get_category_service(session: DbSession) -> CategoryService:
    return CategoryService(CategoryRepository(session), ItemRepository(session), MutationEngine(session))


@router.get("")
async def get_categories(request: Request, session: DbSession, settings: SettingsDep):
    """GET /categories?id=3 for one category with its items, else a page of categories."""
    params = request.query_params
    check_query_params(params.keys(), {"id", "page", "limit"})
    svc = _get_category_service(session)
    category_id = parse_id(params.get("id"), "category_id")
    if category_id is not None:
        return await svc.get(category_id)
    page, limit = parse_paging(
        params.get("page"),
        params.get("limit"),
        default_limit=settings.default_page_size,
        max_limit=settings.max_page_size,
    )
    return await svc.list_categories(page, limit)


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def add_category(request: Request, session: DbSession, uploader: ImageUploaderDep):
    """Multipart: name, user_id, image (file or URL), optional is_active."""
    form = await request.form()
    data = parse_payload(CategoryForm, form_fields(form))
    image = await resolve_image(form.get("image"), uploader, kind=CATEGORY_IMAGE)
    payload = CategoryCreate(**data.model_dump(), image=image)
    return await _get_category_service(session).create(payload)


@router.api_route("/{category_id}", methods=["PUT", "PATCH"], response_model=CategoryResponse)
async def update_category(session: DbSession, category_id: CategoryId, data: CategoryUpdate):
    return await _get_category_service(session).update(category_id, data)


@router.delete("/{category_id}", response_model=CategoryResponse)
async def delete_category(session: DbSession, category_id: CategoryId, data: CategoryDelete):
    """Soft delete; items left without a category are soft-deleted too."""
    return await _get_category_service(session).delete(category_id, data.user_id)
