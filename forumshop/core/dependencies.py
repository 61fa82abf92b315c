"""
FastAPI dependencies - settings, API key enforcement, image uploader.
"""

from typing import Annotated

from fastapi import Depends, Header

from forumshop.config import Settings, get_settings
from forumshop.core.security import verify_api_key
from forumshop.media.imagekit_client import ImageKitClient

SettingsDep = Annotated[Settings, Depends(get_settings)]


async def require_api_key(
    settings: SettingsDep,
    x_api_key: Annotated[str | None, Header()] = None,
) -> None:
    """Router-level guard: every endpoint needs the shared secret."""
    verify_api_key(x_api_key, settings.api_key)


def get_image_uploader(settings: SettingsDep) -> ImageKitClient:
    return ImageKitClient(
        upload_url=settings.imagekit_upload_url,
        private_key=settings.imagekit_private_key,
        max_bytes=settings.max_image_bytes,
    )


ImageUploaderDep = Annotated[ImageKitClient, Depends(get_image_uploader)]
