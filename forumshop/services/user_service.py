"""
User service - lazy registration and credit balance changes.
"""

import logging
from collections.abc import Iterable
from decimal import Decimal

from sqlalchemy.exc import IntegrityError

from forumshop.db.models.user import User
from forumshop.db.repositories.user_repository import UserRepository
from forumshop.errors import NotFound
from forumshop.schemas.user import CreditsUpdate, CreditsUpdateResponse, UserCredits
from forumshop.services.audit import USER, MutationEngine

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, user_repo: UserRepository, engine: MutationEngine, starting_credits: Decimal):
        self.user_repo = user_repo
        self.engine = engine
        self.starting_credits = starting_credits

    async def ensure_registered(self, user_ids: Iterable[int]) -> dict[int, User]:
        """
        Return users keyed by forum id, creating any unknown ones first.
        Each registration commits on its own with an INSERT audit row; losing a
        race on the unique user_id just means someone else registered them.
        """
        user_ids = list(dict.fromkeys(user_ids))
        known = await self.user_repo.get_by_external_ids(user_ids)
        unknown = [uid for uid in user_ids if uid not in known]
        for uid in unknown:
            try:
                await self.engine.create(
                    USER, {"user_id": uid, "credits": self.starting_credits}, actor_id=None
                )
                logger.info("Registered user %s with %s credits", uid, self.starting_credits)
            except IntegrityError:
                logger.info("User %s already registered", uid)
        if not unknown:
            return known
        return await self.user_repo.get_by_external_ids(user_ids)

    async def update_credits(self, data: CreditsUpdate) -> CreditsUpdateResponse:
        user = await self.user_repo.get_by_external_id(data.user_id)
        if user is None:
            raise NotFound("User not found")

        async def change(row):
            row.credits = data.credits

        user = await self.engine.mutate(USER, user.id, change, actor_id=data.user_id)
        logger.info("Credits for user %s set to %s", data.user_id, data.credits)
        return CreditsUpdateResponse(
            user=UserCredits(user_id=user.user_id, credits=float(user.credits))
        )
