"""Category request/response schemas - REST API contract."""

from datetime import datetime

from pydantic import BaseModel

from forumshop.schemas.common import ForumUserId, ImageUrl, Name
from forumshop.schemas.item import ItemResponse


class CategoryForm(BaseModel):
    """Multipart add-category fields; the image is resolved separately."""

    name: Name
    user_id: ForumUserId
    is_active: bool = True


class CategoryCreate(CategoryForm):
    image: ImageUrl


class CategoryUpdate(BaseModel):
    user_id: ForumUserId
    name: Name
    image: ImageUrl
    is_active: bool


class CategoryDelete(BaseModel):
    user_id: ForumUserId


class CategoryResponse(BaseModel):
    id: int
    name: str
    image: str
    is_active: bool
    is_deleted: bool
    created_at: datetime | None = None
    edited_at: datetime | None = None
    created_by: int | None = None
    edited_by: int | None = None

    model_config = {"from_attributes": True}


class CategoryWithItemsResponse(CategoryResponse):
    items: list[ItemResponse] = []
