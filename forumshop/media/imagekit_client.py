"""
ImageKit client - hosts category and item images.
Type and size are checked locally before any network call; host failures surface as UpstreamError.
"""

import json
import logging

import httpx
from starlette.datastructures import UploadFile

from forumshop.core.validation import check_image_url
from forumshop.errors import MissingField, UpstreamError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = frozenset(
    {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}
)

CATEGORY_IMAGE = ("cat", "h-100,w-100,c-at_max,q-85")
ITEM_IMAGE = ("item", "h-200,w-200,c-at_max,q-80")


class ImageKitClient:
    """Uploads one file per call. A transport can be injected for tests."""

    def __init__(
        self,
        upload_url: str,
        private_key: str,
        max_bytes: int = 1024 * 1024,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.upload_url = upload_url
        self.private_key = private_key
        self.max_bytes = max_bytes
        self.transport = transport

    async def upload(self, image: UploadFile, *, prefix: str, transformation: str) -> str:
        if image.content_type not in ALLOWED_IMAGE_TYPES:
            raise ValidationError("Unsupported image type")
        content = await image.read()
        if len(content) > self.max_bytes:
            raise ValidationError(
                f"Image size exceeds the maximum limit of {self.max_bytes // (1024 * 1024)}MB"
            )

        filename = image.filename or "upload"
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=30) as client:
                response = await client.post(
                    self.upload_url,
                    auth=(self.private_key, ""),
                    files={"file": (filename, content, image.content_type)},
                    data={
                        "fileName": f"{prefix}_{filename}",
                        "transformation": json.dumps({"pre": transformation}),
                    },
                )
        except httpx.HTTPError as exc:
            logger.error("ImageKit request failed: %s", exc)
            raise UpstreamError(f"Error uploading image to ImageKit: {exc}") from exc

        if response.is_error:
            logger.error("ImageKit response %s: %s", response.status_code, response.text)
            raise UpstreamError(
                f"Error uploading image to ImageKit: {response.status_code} - {response.text}"
            )
        url = response.json().get("url")
        if not url:
            raise UpstreamError("Error uploading image to ImageKit: response has no url")
        return url


async def resolve_image(
    value: object,
    uploader: ImageKitClient,
    *,
    kind: tuple[str, str],
) -> str:
    """Form image field: an uploaded file goes to ImageKit, a string must already be a URL."""
    if isinstance(value, UploadFile):
        prefix, transformation = kind
        return await uploader.upload(value, prefix=prefix, transformation=transformation)
    if isinstance(value, str) and value.strip():
        try:
            return check_image_url(value.strip())
        except ValueError:
            raise ValidationError("Invalid image file") from None
    raise MissingField(["image"])
