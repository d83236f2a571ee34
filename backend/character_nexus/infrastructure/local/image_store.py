"""
Local file system image store.

Downloaded avatars are re-encoded to WebP, which drops all source metadata,
and saved flat under the image directory with a random filename.
"""

import asyncio
import io
import logging
from pathlib import Path
from typing import Optional
from uuid import uuid4

import httpx
from PIL import Image, ImageOps, UnidentifiedImageError

from character_nexus.core.config import get_settings
from character_nexus.core.exceptions import ImageProcessingError
from character_nexus.interfaces.image_store import IImageStore

logger = logging.getLogger(__name__)

ALLOWED_FORMATS = frozenset({"jpeg", "png", "webp", "gif"})
OUTPUT_FORMAT = "webp"


class LocalImageStore(IImageStore):
    """Stores processed images in a local directory."""

    def __init__(
        self,
        base_path: Optional[str] = None,
        max_size: Optional[int] = None,
        max_dimension: Optional[int] = None,
        quality: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_path = Path(base_path or settings.IMAGE_DIR)
        self.max_size = max_size or settings.MAX_IMAGE_SIZE
        self.max_dimension = max_dimension or settings.IMAGE_MAX_DIMENSION
        self.quality = quality or settings.IMAGE_QUALITY
        self.timeout = timeout or settings.IMAGE_DOWNLOAD_TIMEOUT_SECONDS
        self._transport = transport

    def _resolve_path(self, filename: str) -> Path:
        """Resolve a filename inside base_path, rejecting anything that escapes it."""
        base = self.base_path.resolve()
        path = (base / filename).resolve()
        if path.parent != base:
            raise ImageProcessingError("Invalid image path")
        return path

    async def _fetch(self, url: str) -> bytes:
        data = bytearray()
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport, follow_redirects=True
            ) as client:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()
                    async for chunk in response.aiter_bytes():
                        data.extend(chunk)
                        if len(data) > self.max_size:
                            raise ImageProcessingError(self._too_large_message())
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ImageProcessingError(f"Failed to download image: {e}") from e
        return bytes(data)

    def _too_large_message(self) -> str:
        return f"Image too large. Maximum size is {self.max_size // (1024 * 1024)}MB"

    def _process(self, data: bytes) -> bytes:
        """Validate, orient, shrink and re-encode an image. Runs in a worker thread."""
        try:
            with Image.open(io.BytesIO(data)) as source:
                image_format = (source.format or "").lower()
                if image_format not in ALLOWED_FORMATS:
                    raise ImageProcessingError(
                        f"Invalid image format: {image_format or 'unknown'}. "
                        f"Allowed: {', '.join(sorted(ALLOWED_FORMATS))}"
                    )
                image = ImageOps.exif_transpose(source)
                image = image.convert("RGBA" if image.mode in ("RGBA", "LA", "P", "PA") else "RGB")
                image.thumbnail((self.max_dimension, self.max_dimension))

                output = io.BytesIO()
                image.save(output, format=OUTPUT_FORMAT.upper(), quality=self.quality)
                return output.getvalue()
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            ValueError,
        ) as e:
            raise ImageProcessingError(f"Failed to process image: {e}") from e

    async def save(self, data: bytes) -> str:
        """Process raw image bytes and store them. Returns the new filename."""
        if len(data) > self.max_size:
            raise ImageProcessingError(self._too_large_message())

        processed = await asyncio.to_thread(self._process, data)
        filename = f"{uuid4()}.{OUTPUT_FORMAT}"
        path = self._resolve_path(filename)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(path.write_bytes, processed)
        except OSError as e:
            raise ImageProcessingError(f"Failed to store image: {e}") from e

        logger.info(
            "Saved image %s (%d -> %d bytes)", filename, len(data), len(processed)
        )
        return filename

    async def download(self, url: str) -> str:
        logger.info("Downloading image %s", url)
        data = await self._fetch(url)
        return await self.save(data)

    async def delete(self, filename: str) -> bool:
        if not filename:
            return False
        try:
            path = self._resolve_path(filename)
        except ImageProcessingError:
            logger.warning("Refusing to delete image outside image directory: %r", filename)
            return False

        try:
            path.unlink()
        except FileNotFoundError:
            logger.info("Image %s not found, skipping deletion", filename)
            return False
        except OSError:
            logger.error("Failed to delete image %s", filename, exc_info=True)
            return False

        logger.info("Deleted image %s", filename)
        return True
