"""
API v1 router - aggregates all endpoint modules behind the API key check.
"""

from fastapi import APIRouter, Depends

from forumshop.api.v1.endpoints import categories, health, inventory, items, purchases, users
from forumshop.core.dependencies import require_api_key

api_router = APIRouter(prefix="/v1", dependencies=[Depends(require_api_key)])

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(categories.router, prefix="/categories", tags=["categories"])
api_router.include_router(items.router, prefix="/items", tags=["items"])
api_router.include_router(inventory.router, tags=["inventory"])
api_router.include_router(purchases.router, prefix="/purchases", tags=["purchases"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
