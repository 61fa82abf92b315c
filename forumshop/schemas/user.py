"""User credit schemas."""

from decimal import Decimal

from pydantic import BaseModel, Field

from forumshop.schemas.common import ForumUserId


class CreditsUpdate(BaseModel):
    user_id: ForumUserId
    credits: Decimal = Field(ge=0, max_digits=12, decimal_places=2)


class UserCredits(BaseModel):
    user_id: int
    credits: float


class CreditsUpdateResponse(BaseModel):
    message: str = "Credits updated successfully"
    user: UserCredits
