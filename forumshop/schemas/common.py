"""Shared field types and response envelopes."""

import math
from decimal import Decimal
from typing import Annotated, Generic, TypeVar

from pydantic import AfterValidator, BaseModel, BeforeValidator, Field, StringConstraints

from forumshop.core.validation import check_image_url, clean_name, clean_text

T = TypeVar("T")

ForumUserId = Annotated[int, Field(gt=0)]
EntityId = Annotated[int, Field(gt=0)]
Name = Annotated[str, StringConstraints(min_length=1, max_length=100), BeforeValidator(clean_name)]
Description = Annotated[
    str, StringConstraints(min_length=1, max_length=500), BeforeValidator(clean_text)
]
ImageUrl = Annotated[
    str, StringConstraints(strip_whitespace=True, max_length=500), AfterValidator(check_image_url)
]
Price = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "Pagination":
        return cls(total=total, page=page, limit=limit, pages=math.ceil(total / limit) if limit else 0)


class Page(BaseModel, Generic[T]):
    items: list[T]
    pagination: Pagination


class ErrorResponse(BaseModel):
    error: str
