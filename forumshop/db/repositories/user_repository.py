"""
User repository - lookups by the external forum identity.
"""

from collections.abc import Iterable

from sqlalchemy import select

from forumshop.db.models.user import User
from forumshop.db.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, session):
        super().__init__(session, User)

    async def get_by_external_id(self, user_id: int, *, for_update: bool = False) -> User | None:
        stmt = (
            select(User)
            .where(User.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_external_ids(self, user_ids: Iterable[int]) -> dict[int, User]:
        """One query for a whole batch, keyed by forum user id."""
        user_ids = list(user_ids)
        if not user_ids:
            return {}
        result = await self.session.execute(
            select(User)
            .where(User.user_id.in_(user_ids))
            .execution_options(populate_existing=True)
        )
        return {user.user_id: user for user in result.scalars().all()}
