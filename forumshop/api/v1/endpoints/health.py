"""
Health check - keep-alive probe that also touches the database.
"""

import logging

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from forumshop.core.dependencies import SettingsDep
from forumshop.db.session import DbSession
from forumshop.errors import InternalError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def health(session: DbSession, settings: SettingsDep):
    """Runs SELECT 1 so the database connection stays warm."""
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Database health check failed: %s", exc)
        raise InternalError("Database unavailable") from exc
    return {"status": "ok", "app": settings.app_name}
