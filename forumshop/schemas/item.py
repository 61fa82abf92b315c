"""Item request/response schemas - REST API contract."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, Field

from forumshop.schemas.common import Description, EntityId, ForumUserId, ImageUrl, Name, Price


def _split_ids(value):
    """Accept repeated form fields, a JSON list, or one comma-separated string."""
    if isinstance(value, str):
        return [part.strip() for part in value.split(",")]
    if isinstance(value, list) and len(value) == 1 and isinstance(value[0], str) and "," in value[0]:
        return [part.strip() for part in value[0].split(",")]
    return value


CategoryIds = Annotated[list[EntityId], Field(min_length=1), BeforeValidator(_split_ids)]


class ItemForm(BaseModel):
    """Multipart add-item fields; the image is resolved separately."""

    name: Name
    description: Description
    price: Price
    categories: CategoryIds
    user_id: ForumUserId
    is_active: bool = True


class ItemCreate(ItemForm):
    image: ImageUrl


class ItemUpdate(BaseModel):
    user_id: ForumUserId
    name: Name
    description: Description
    price: Price
    image: ImageUrl
    is_active: bool
    categories: CategoryIds | None = None


class ItemDelete(BaseModel):
    user_id: ForumUserId


class CategoryRef(BaseModel):
    id: int
    name: str
    image: str

    model_config = {"from_attributes": True}


class ItemResponse(BaseModel):
    id: int
    name: str
    description: str
    price: float
    image: str
    is_active: bool
    is_deleted: bool
    created_at: datetime | None = None
    edited_at: datetime | None = None
    created_by: int | None = None
    edited_by: int | None = None

    model_config = {"from_attributes": True}


class ItemWithCategoriesResponse(ItemResponse):
    categories: list[CategoryRef] = []


class ItemMutationResponse(ItemResponse):
    categories: list[int] = []  # Linked category ids, populated by service layer
