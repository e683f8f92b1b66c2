"""
ScanPlant Backend — Blob Storage Service
==========================================

What:  Stores plant photos and hands back opaque references to them.
How:   Validates size, extension and actual image content (Pillow), writes
       the bytes under a UUID filename with async file I/O, and returns a
       public URL of the form {public_base_url}/files/<uuid>.<ext>.
Who:   Called by PlantService on plant create, image replacement and delete.
       The /files route serves the stored objects back.

Contract seen by PlantService:
    store(content, suggested_name?) -> reference
    resolve(name) -> reference | None
    delete(name) -> bool
    name_from_reference(reference) -> name

Storage layout:
    storage/
    ├── 3f2b9c1e-....jpg
    └── a81d7740-....png

    Flat, one object per UUID name, like a blob container. The object name is
    the last path segment of its reference, which is how PlantService finds
    the object to delete when a plant's photo is replaced or the plant goes.

Failure mode:
    Bad input raises ValidationError. I/O failures raise FileStorageError and
    propagate to the caller; nothing here retries.
"""

import io
import logging
import uuid
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import urlparse

import aiofiles
import aiofiles.os
from PIL import Image, UnidentifiedImageError

from app.config import settings
from app.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

# ── Allowed Image Types ───────────────────────────────────────────────────
# Pillow format name → stored extension
ALLOWED_FORMATS = {
    "JPEG": ".jpg",
    "PNG": ".png",
    "WEBP": ".webp",
}

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}


class StorageService:
    """
    Local-disk blob store for plant images.

    Lifecycle of an uploaded photo:
        1. PlantService passes the raw bytes and the client's filename
        2. Size check, extension check, content sniffing
        3. Bytes written to <storage_root>/<uuid><ext>
        4. Reference URL returned and stored verbatim on the plant row
        5. On photo replacement or plant deletion: delete(name)
    """

    def __init__(self, storage_root: Optional[str] = None, public_base_url: Optional[str] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
            public_base_url: Override the reference URL prefix (used in tests).
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.public_base_url = (public_base_url or settings.public_base_url).rstrip("/")
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("StorageService initialized with storage_root=%s", self.storage_root)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_size(self, content: bytes) -> None:
        if not content:
            raise ValidationError(
                message="An image file is required and must not be empty.",
                field="image",
            )
        if len(content) > settings.max_file_size:
            max_mb = settings.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=(
                    f"Image is too large ({len(content) / (1024 * 1024):.1f}MB). "
                    f"Maximum allowed size is {max_mb:.0f}MB."
                ),
                field="image",
                context={"max_size_mb": max_mb, "actual_size": len(content)},
            )

    def validate_extension(self, suggested_name: Optional[str]) -> None:
        """Rejects obviously wrong filenames. A missing name is allowed."""
        if not suggested_name:
            return
        ext = Path(suggested_name).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or 'none'}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="image",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )

    def detect_format(self, content: bytes) -> str:
        """
        Inspect the bytes and return the stored extension for them.

        Pillow reads the header to identify the format, then verify() walks
        the file structure without decoding pixels.
        """
        try:
            with Image.open(io.BytesIO(content)) as image:
                image_format = image.format
                image.verify()
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            raise ValidationError(
                message="The uploaded file is not a readable image (JPEG, PNG or WEBP).",
                field="image",
                context={"error": str(e)},
            )

        if image_format not in ALLOWED_FORMATS:
            raise ValidationError(
                message=f"Image format '{image_format}' is not supported. Use JPEG, PNG or WEBP.",
                field="image",
                context={"detected_format": image_format},
            )
        return ALLOWED_FORMATS[image_format]

    # ── Blob store contract ───────────────────────────────────────────────

    def reference_for(self, name: str) -> str:
        return f"{self.public_base_url}/files/{name}"

    @staticmethod
    def name_from_reference(reference: str) -> str:
        """Last path segment of a reference URL (or of a bare path)."""
        return PurePosixPath(urlparse(reference).path).name

    def path_for(self, name: str) -> Path:
        """
        Absolute path of a stored object.

        Raises:
            ValidationError if the name would escape the storage root.
        """
        path = (self.storage_root / name).resolve()
        if path.parent != self.storage_root:
            raise ValidationError(message="Invalid file name", field="name")
        return path

    async def store(self, content: bytes, suggested_name: Optional[str] = None) -> str:
        """
        Validate and persist an image, returning its reference URL.

        Raises:
            ValidationError: empty, too large, wrong extension, not an image
            FileStorageError: the write failed
        """
        self.validate_size(content)
        self.validate_extension(suggested_name)
        extension = self.detect_format(content)

        name = f"{uuid.uuid4()}{extension}"
        path = self.storage_root / name
        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store image at %s: %s", path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(path), "os_error": str(e)},
            )

        logger.info("Image stored: %s (%d bytes)", name, len(content))
        return self.reference_for(name)

    async def resolve(self, name: str) -> Optional[str]:
        """Reference for `name` if the object exists, else None."""
        path = self.path_for(name)
        if await aiofiles.os.path.exists(path):
            return self.reference_for(name)
        return None

    async def delete(self, name: str) -> bool:
        """
        Remove a stored object.

        Returns:
            True if it existed and was removed, False if there was nothing to remove.
        Raises:
            FileStorageError on any other I/O failure.
        """
        path = self.path_for(name)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            logger.debug("Delete: image already gone: %s", name)
            return False
        except OSError as e:
            logger.error("Failed to delete image %s: %s", name, str(e))
            raise FileStorageError(
                message="Failed to delete stored image.",
                context={"name": name, "os_error": str(e)},
            )
        logger.info("Image deleted: %s", name)
        return True


# ── Singleton Instance ────────────────────────────────────────────────────
storage_service = StorageService()
