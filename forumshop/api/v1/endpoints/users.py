"""
User endpoints - credit balance updates.
"""

from fastapi import APIRouter

from forumshop.core.dependencies import SettingsDep
from forumshop.db.repositories.user_repository import UserRepository
from forumshop.db.session import DbSession
from forumshop.schemas.user import CreditsUpdate, CreditsUpdateResponse
from forumshop.services.audit import MutationEngine
from forumshop.services.user_service import UserService

router = APIRouter()


def _get_user_service(session: DbSession, settings: SettingsDep) -> UserService:
    return UserService(UserRepository(session), MutationEngine(session), settings.starting_credits)


@router.put("/credits", response_model=CreditsUpdateResponse)
async def update_credits(session: DbSession, settings: SettingsDep, data: CreditsUpdate):
    """Set (not add to) the user's credit balance."""
    return await _get_user_service(session, settings).update_credits(data)
