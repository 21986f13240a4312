"""Cloudinary integration for user images."""

from __future__ import annotations

import asyncio
import io
import logging
from typing import Any, Dict, Optional

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader

from ..domain.models import MediaFile
from ..domain.ports.media import MediaStorage

logger = logging.getLogger(__name__)


class CloudinaryMediaStorage(MediaStorage):
    """Uploads images to Cloudinary and hands back their public URL."""

    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        folder: Optional[str] = None,
    ) -> None:
        self._folder = folder
        self.enabled = bool(cloud_name and api_key and api_secret)
        if self.enabled:
            cloudinary.config(
                cloud_name=cloud_name,
                api_key=api_key,
                api_secret=api_secret,
                secure=True,
            )
        else:
            logger.warning("Cloudinary credentials missing; image uploads are disabled.")

    async def upload(self, media: MediaFile) -> Optional[str]:
        if not self.enabled:
            logger.error("Refusing to upload %s: Cloudinary is not configured", media.filename)
            return None
        if media.is_empty:
            logger.warning("Skipping upload of empty file %s", media.filename)
            return None
        try:
            result = await asyncio.to_thread(self._upload_sync, media)
        except cloudinary.exceptions.Error as exc:
            logger.error("Cloudinary upload of %s failed: %s", media.filename, exc)
            return None
        url = result.get("secure_url") or result.get("url")
        if not url:
            logger.error("Cloudinary returned no URL for %s", media.filename)
            return None
        logger.info("Uploaded %s to %s", media.filename, url)
        return url

    def _upload_sync(self, media: MediaFile) -> Dict[str, Any]:
        options: Dict[str, Any] = {"resource_type": "auto"}
        if self._folder:
            options["folder"] = self._folder
        stream = io.BytesIO(media.content)
        stream.name = media.filename
        return cloudinary.uploader.upload(stream, **options)
