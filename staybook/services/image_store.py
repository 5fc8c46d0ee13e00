"""Profile image upload to Cloudinary; returns the hosted image URL."""

from __future__ import annotations

import hashlib
import logging
import time
from typing import TYPE_CHECKING

import httpx

from staybook.core.errors import ImageStoreError, ImageStoreNotConfiguredError
from staybook.schemas.user import ProfileImage

if TYPE_CHECKING:
    from staybook.core.config import Settings

logger = logging.getLogger(__name__)

CLOUDINARY_UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"
MAX_IMAGE_BYTES = 10 * 1024 * 1024  # 10 MB
ALLOWED_CONTENT_TYPES = frozenset({"image/jpeg", "image/png", "image/webp", "image/gif"})


def _is_cloudinary_configured(settings: Settings) -> bool:
    if not settings.CLOUDINARY_CLOUD_NAME or not settings.CLOUDINARY_CLOUD_NAME.strip():
        return False
    if not settings.CLOUDINARY_API_KEY or not settings.CLOUDINARY_API_KEY.strip():
        return False
    if settings.CLOUDINARY_API_SECRET is None:
        return False
    return bool(settings.CLOUDINARY_API_SECRET.get_secret_value().strip())


def sign_params(params: dict[str, str], api_secret: str) -> str:
    """Cloudinary signature: sha1 of sorted key=value pairs joined by '&', then the secret."""
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
    return hashlib.sha1((to_sign + api_secret).encode("utf-8")).hexdigest()


class CloudinaryImageStore:
    """Signed uploads against the Cloudinary REST API."""

    def __init__(self, settings: Settings, client: httpx.Client | None = None) -> None:
        self._settings = settings
        self._client = client

    def upload(self, image: ProfileImage) -> str:
        """Upload image bytes and return the secure URL. Raises ImageStoreError on failure."""
        settings = self._settings
        if not _is_cloudinary_configured(settings):
            raise ImageStoreNotConfiguredError(
                "Image store is not configured; set CLOUDINARY_CLOUD_NAME, "
                "CLOUDINARY_API_KEY, CLOUDINARY_API_SECRET."
            )
        if not image.data:
            raise ImageStoreError("Uploaded image is empty.")
        if len(image.data) > MAX_IMAGE_BYTES:
            raise ImageStoreError(
                f"Image size must not exceed {MAX_IMAGE_BYTES // (1024 * 1024)} MB."
            )
        content_type = (image.content_type or "").lower()
        if content_type and content_type not in ALLOWED_CONTENT_TYPES:
            raise ImageStoreError(f"Unsupported image type: {content_type}")

        params = {"folder": settings.CLOUDINARY_FOLDER, "timestamp": str(int(time.time()))}
        secret = settings.CLOUDINARY_API_SECRET.get_secret_value()
        data = {
            **params,
            "api_key": settings.CLOUDINARY_API_KEY.strip(),
            "signature": sign_params(params, secret),
        }
        files = {"file": (image.filename or "upload", image.data, content_type or "application/octet-stream")}
        url = CLOUDINARY_UPLOAD_URL.format(cloud_name=settings.CLOUDINARY_CLOUD_NAME.strip())

        try:
            if self._client is not None:
                resp = self._client.post(
                    url, data=data, files=files, timeout=settings.CLOUDINARY_REQUEST_TIMEOUT_SEC
                )
            else:
                with httpx.Client() as client:
                    resp = client.post(
                        url, data=data, files=files, timeout=settings.CLOUDINARY_REQUEST_TIMEOUT_SEC
                    )
        except httpx.TimeoutException as e:
            raise ImageStoreError("Image store timed out.") from e
        except httpx.HTTPError as e:
            raise ImageStoreError(f"Image store unreachable: {e!s}") from e

        if resp.status_code >= 400:
            try:
                error = resp.json().get("error")
                detail = (error.get("message") if isinstance(error, dict) else None) or resp.text[:500]
            except (ValueError, AttributeError):
                detail = resp.text[:500] if resp.text else "Unknown error"
            logger.error(
                "Image upload rejected",
                extra={"status_code": resp.status_code, "reason": str(detail)[:500]},
            )
            raise ImageStoreError(f"Image store returned {resp.status_code}: {detail}")

        try:
            payload = resp.json()
        except ValueError as e:
            raise ImageStoreError("Image store returned an invalid response.") from e
        secure_url = payload.get("secure_url") if isinstance(payload, dict) else None
        if not secure_url:
            raise ImageStoreError("Image store response missing secure_url.")
        return secure_url
