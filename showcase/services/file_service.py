"""
Showcase Backend — File Storage Service
=========================================

What:  Validates, stores, reads and deletes uploaded item images.
Why:   Centralizes all file system operations with security checks.
How:   Decodes the payload with Pillow to prove it is an image of an allowed
       format, then writes it under a random name with async file I/O.
Who:   Called by ItemService (create/update/delete) and the file route.

Security Model:
    1. Size check:      Empty or oversized payloads are rejected before decoding
    2. Content check:   Pillow identifies the real format from the bytes;
                        client filenames and MIME headers are never trusted
    3. Random filename: 40 hex characters, no user input, so no path traversal
    4. Exclusive create: An existing file is never overwritten
    5. Path guard:      Refs that resolve outside storage_root are refused

Directory Structure:
    storage/
    └── items/
        ├── 3f9c0d...e1a2.png
        └── 8b41aa...07cd.jpg
"""

import io
import logging
import secrets
from pathlib import Path
from typing import Dict, Optional

import aiofiles
import aiofiles.os
from PIL import Image, UnidentifiedImageError

from showcase.config import settings
from showcase.exceptions import FileStorageError, InvalidUploadError, NotFoundError

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
# Pillow format name → stored extension
IMAGE_FORMATS: Dict[str, str] = {
    "PNG": ".png",
    "JPEG": ".jpg",
    "GIF": ".gif",
    "BMP": ".bmp",
    "WEBP": ".webp",
}

# Upload category → accepted formats
UPLOAD_PROFILES: Dict[str, Dict[str, str]] = {
    "item": IMAGE_FORMATS,
}

_NAME_ATTEMPTS = 3


class FileService:
    """
    Manages the stored-file lifecycle for uploads.

    Lifecycle of an uploaded file:
        1. ItemService calls save() with the raw bytes
        2. Size check, then Pillow decodes and verifies the image
        3. Bytes are written to <subpath>/<random>.<ext>
        4. The relative ref is returned and stored on the Item row
        5. delete() removes it when the item is replaced or deleted
    """

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
                          If None, uses settings.storage_root.
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_size(self, content: bytes) -> None:
        if not content:
            raise InvalidUploadError(
                message="Invalid image upload. The file is empty.",
                context={"size": 0},
            )
        if len(content) > settings.max_file_size:
            max_mb = settings.max_file_size / (1024 * 1024)
            raise InvalidUploadError(
                message=f"Invalid image upload. The file is too large (max {max_mb:.0f}MB).",
                context={"size": len(content), "max_size": settings.max_file_size},
            )

    def detect_image_format(self, content: bytes, category: str = "item") -> str:
        """
        Identify the image format from the bytes and return the extension to store under.

        Raises:
            InvalidUploadError if the bytes are not a decodable image of an
            allowed format for `category`.
        """
        allowed = UPLOAD_PROFILES[category]
        try:
            with Image.open(io.BytesIO(content)) as img:
                image_format = img.format
                # verify() walks the data without decoding pixels
                img.verify()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
            raise InvalidUploadError(
                message="Invalid image upload. The file must be an image.",
                context={"decode_error": type(e).__name__},
            )

        if image_format not in allowed:
            raise InvalidUploadError(
                message=(
                    f"Invalid image upload. Format '{image_format}' is not supported. "
                    f"Allowed: {', '.join(sorted(allowed))}"
                ),
                context={"detected_format": image_format},
            )
        return allowed[image_format]

    def validate(self, content: bytes, category: str = "item") -> str:
        """Run every check without writing anything. Returns the extension."""
        self.validate_size(content)
        return self.detect_image_format(content, category)

    # ── Paths ─────────────────────────────────────────────────────────────

    def resolve_path(self, ref: str) -> Path:
        """
        Map a stored ref to an absolute path inside storage_root.

        Raises:
            InvalidUploadError if the ref escapes the storage root or is not a
            usable path (NUL bytes, names the OS refuses).
        """
        if "\x00" in ref:
            raise InvalidUploadError(
                message="Invalid file reference.",
                context={"ref": ref, "error": "embedded null byte"},
            )
        try:
            path = (self.storage_root / ref).resolve()
        except (ValueError, OSError) as e:
            raise InvalidUploadError(
                message="Invalid file reference.",
                context={"ref": ref, "error": str(e)},
            )
        if path == self.storage_root or not path.is_relative_to(self.storage_root):
            raise InvalidUploadError(
                message="Invalid file reference.",
                context={"ref": ref},
            )
        return path

    def _new_ref(self, subpath: str, extension: str) -> str:
        return f"{subpath.strip('/')}/{secrets.token_hex(20)}{extension}"

    # ── Operations ────────────────────────────────────────────────────────

    async def save(
        self,
        content: bytes,
        category: str = "item",
        subpath: str = "items",
        filename: Optional[str] = None,
    ) -> str:
        """
        Validate and store an upload; return its stable ref (e.g. "items/<hash>.png").

        Raises:
            InvalidUploadError: payload is empty, too large or not an allowed image
            FileStorageError:   the write itself failed (disk full, permissions)
        """
        extension = self.validate(content, category)

        for _ in range(_NAME_ATTEMPTS):
            ref = self._new_ref(subpath, extension)
            path = self.resolve_path(ref)
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                # "xb": exclusive create, never replaces an existing file
                async with aiofiles.open(path, "xb") as f:
                    await f.write(content)
            except FileExistsError:
                logger.warning("Stored name collision on %s, retrying", ref)
                continue
            except OSError as e:
                logger.error("Failed to store file at %s: %s", path, str(e))
                raise FileStorageError(
                    message="Failed to save uploaded image. Please try again.",
                    context={"path": str(path), "os_error": str(e)},
                )

            logger.info(
                "File stored: %s (%d bytes, original name %s)",
                ref,
                len(content),
                filename or "unknown",
            )
            return ref

        raise FileStorageError(
            message="Failed to save uploaded image. Please try again.",
            context={"subpath": subpath, "reason": "name collisions"},
        )

    async def read(self, ref: str) -> bytes:
        path = self.resolve_path(ref)
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except (FileNotFoundError, IsADirectoryError):
            raise NotFoundError(resource="file", resource_id=ref)

    async def exists(self, ref: str) -> bool:
        return await aiofiles.os.path.isfile(self.resolve_path(ref))

    async def delete(self, ref: str) -> None:
        """
        Remove a stored file. A file that is already gone is not an error.

        Raises:
            FileStorageError for any other OS failure, so the caller can keep
            its row and retry.
        """
        path = self.resolve_path(ref)
        try:
            await aiofiles.os.remove(path)
            logger.info("File deleted: %s", ref)
        except FileNotFoundError:
            logger.debug("Delete: file already gone: %s", ref)
        except OSError as e:
            logger.error("Failed to delete file %s: %s", ref, str(e))
            raise FileStorageError(
                message="Failed to delete stored image. Please try again.",
                context={"ref": ref, "os_error": str(e)},
            )

    async def cleanup_file(self, ref: str) -> None:
        """
        Best-effort removal of a file whose row was never written.

        Never raises: the caller is already handling a more important error.
        """
        try:
            await self.delete(ref)
        except (FileStorageError, InvalidUploadError) as e:
            logger.warning("Failed to clean up file %s: %s", ref, e.message)


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
