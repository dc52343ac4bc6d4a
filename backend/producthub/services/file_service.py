"""
ProductHub Backend — File Storage Service
============================================

What:  Validates uploaded images and stores them under STORAGE_ROOT.
How:   Checks presence, declared MIME type, size and the sniffed content
       type (libmagic via python-magic), then writes the bytes with aiofiles
       under a generated name. Only the generated name is
       handed back for persistence; the bytes never touch the database.
Who:   UserService (profile images) and ProductService (product images).
When:  Before the conditional UPDATE that records the new filename.

Naming scheme:
    <epoch millis>-<random 0..1e9><ext>      e.g. 1718000000000-483920175.png

    The name carries no user input apart from the lower-cased extension, so
    path traversal through the original filename is not possible.
"""

import logging
import os
import random
import time
from pathlib import Path
from typing import Optional

import aiofiles
import magic
from fastapi import UploadFile

from producthub.config import settings
from producthub.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
# Declared MIME type → extension used when the original name has none
ALLOWED_MIME_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
}

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png"}

# What libmagic must report for the bytes themselves
ALLOWED_DETECTED_TYPES = {"image/jpeg", "image/png"}

# libmagic only needs the file header
SNIFF_BYTES = 2048

MISSING_IMAGE_MESSAGE = "Image tidak boleh kosong"
INVALID_IMAGE_MESSAGE = "Format Image tidak sesuai"


class FileService:
    """
    Manages image validation, storage and cleanup.

    Lifecycle of an uploaded image:
        1. Route reads the multipart `image` field with read_upload()
        2. validate_and_store(): presence → MIME type → size → content → write
        3. Service records the returned filename with a conditional UPDATE
        4. On 0 affected rows: cleanup_file() removes the new file
        5. On success: cleanup_file() removes the image it replaced
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

    def validate_mime_type(self, content_type: Optional[str]) -> str:
        """
        Check the declared content type of the upload.

        Returns:
            Normalized MIME type (lower-case, parameters stripped).

        Raises:
            ValidationError("Format Image tidak sesuai") for anything other than
            image/jpeg, image/jpg or image/png.
        """
        mime_type = (content_type or "").split(";", 1)[0].strip().lower()
        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=INVALID_IMAGE_MESSAGE,
                field="image",
                context={"content_type": mime_type, "allowed": sorted(ALLOWED_MIME_TYPES)},
            )
        return mime_type

    def validate_size(self, size: int) -> None:
        """
        Reject empty files and files above settings.max_file_size.

        Raises:
            ValidationError with a human-readable limit.
        """
        if size == 0:
            raise ValidationError(message=MISSING_IMAGE_MESSAGE, field="image")

        if size > settings.max_file_size:
            max_mb = settings.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=f"Ukuran image maksimal {max_mb:.0f}MB",
                field="image",
                context={"max_size_mb": max_mb, "actual_size": size},
            )

    def validate_content(self, content: bytes) -> str:
        """
        Sniff the file header and require a real JPEG or PNG.

        A renamed script labelled image/png passes the declared-type check
        but not this one.

        Returns:
            The detected MIME type.

        Raises:
            ValidationError("Format Image tidak sesuai") when the bytes are not
            an allowed image.
            FileStorageError when libmagic itself fails.
        """
        try:
            detected = magic.from_buffer(content[:SNIFF_BYTES], mime=True)
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise FileStorageError(
                message="Tidak dapat memeriksa format image.",
                context={"error": str(e)},
            )

        if detected not in ALLOWED_DETECTED_TYPES:
            raise ValidationError(
                message=INVALID_IMAGE_MESSAGE,
                field="image",
                context={"detected": detected, "allowed": sorted(ALLOWED_DETECTED_TYPES)},
            )
        return detected

    async def read_upload(self, upload: Optional[UploadFile]) -> Optional[bytes]:
        """
        Read a multipart upload, never more than max_file_size + 1 bytes.

        One byte past the limit is enough for validate_size() to reject the
        file, so an oversized upload is never held in memory whole.
        """
        if upload is None:
            return None
        return await upload.read(settings.max_file_size + 1)

    def pick_extension(self, filename: Optional[str], mime_type: str) -> str:
        """Original extension when it is an image one, else the MIME default."""
        ext = Path(filename or "").suffix.lower()
        if ext in ALLOWED_EXTENSIONS:
            return ext
        return ALLOWED_MIME_TYPES[mime_type]

    def generate_filename(self, extension: str) -> str:
        """<epoch millis>-<random suffix><ext>"""
        return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{extension}"

    async def store_file(self, content: bytes, extension: str) -> str:
        """
        Write validated bytes under a fresh generated name.

        Returns:
            The generated filename (relative to storage_root).

        Raises:
            FileStorageError if the directory or the write fails.
        """
        filename = self.generate_filename(extension)
        absolute_path = self.storage_root / filename

        try:
            self.storage_root.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Gagal menyimpan image. Silakan coba lagi.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", filename, len(content))
        return filename

    async def cleanup_file(self, filename: Optional[str]) -> None:
        """
        Remove a stored image. Best effort: failures are logged, not raised.

        Names that would resolve outside storage_root are ignored.
        """
        if not filename:
            return
        path = (self.storage_root / filename).resolve()
        if path.parent != self.storage_root:
            logger.warning("Refusing to clean up path outside storage root: %s", filename)
            return
        try:
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", filename, str(e))

    async def validate_and_store(
        self,
        filename: Optional[str],
        content_type: Optional[str],
        content: Optional[bytes],
    ) -> str:
        """
        Complete validation and storage pipeline for one upload.

        Validation order:
            1. Presence — a missing upload is a client error, not a fault
            2. Declared MIME type
            3. Size (non-empty, under the limit)
            4. Sniffed content type
            5. Write to disk

        Returns:
            Generated filename to persist.
        """
        if content is None:
            raise ValidationError(message=MISSING_IMAGE_MESSAGE, field="image")

        mime_type = self.validate_mime_type(content_type)
        self.validate_size(len(content))
        self.validate_content(content)

        extension = self.pick_extension(filename, mime_type)
        return await self.store_file(content, extension)


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
