"""
RecipeBox Backend: Upload Storage Service
=========================================

What:  Writes uploaded recipe images into the uploads directory.
How:   Sanitizes the client filename, prefixes it with the current Unix
       time, writes the bytes with aiofiles and returns the public URL
       under which the /uploads static mount serves the file.
Who:   Called by RecipeService on create and update.

Naming:
    uploads/
    ├── 1760890000_pancakes.jpg
    └── 1760890012_green_curry.png

    The timestamp prefix keeps repeated uploads of the same file apart.
    Two uploads of the same name within one second collide and the later
    write wins.
"""

import logging
import os
import re
import time
from pathlib import Path
from typing import Optional

import aiofiles

from recipebox.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

# URL prefix of the static mount that serves upload_dir
UPLOADS_URL_PREFIX = "/uploads/"

# Anything outside this set is replaced in stored filenames
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class UploadService:
    """
    Stores and removes uploaded images.

    Attributes:
        upload_dir:      Absolute directory the files are written to
        max_upload_size: Largest accepted upload, in bytes
    """

    def __init__(self, upload_dir: str, max_upload_size: int):
        self.upload_dir = Path(upload_dir).resolve()
        self.max_upload_size = max_upload_size
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info("UploadService initialized with upload_dir=%s", self.upload_dir)

    @staticmethod
    def sanitize_filename(filename: Optional[str]) -> str:
        """
        Reduce a client-supplied filename to a safe base name.

        "../../etc/passwd" → "passwd", "my photo.JPG" → "my_photo.JPG".
        """
        # Browsers on Windows may send full paths with backslashes
        base = (filename or "").replace("\\", "/").rsplit("/", 1)[-1]
        safe = _UNSAFE_FILENAME_CHARS.sub("_", base).lstrip(".")
        return safe or "upload"

    def validate_size(self, size: int) -> None:
        """
        Raises:
            ValidationError when the upload exceeds max_upload_size
        """
        if size > self.max_upload_size:
            max_mb = self.max_upload_size / (1024 * 1024)
            raise ValidationError(
                message=(
                    f"Image size ({size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB."
                ),
                field="image",
                context={"max_size": self.max_upload_size, "actual_size": size},
            )

    def _generate_filename(self, original: Optional[str]) -> str:
        return f"{int(time.time())}_{self.sanitize_filename(original)}"

    async def store_upload(self, filename: Optional[str], content: bytes) -> str:
        """
        Validate and write an uploaded image.

        Args:
            filename: Name the client gave the file
            content:  Raw file bytes

        Returns:
            Public URL of the stored file, e.g. "/uploads/1760890000_oats.jpg"

        Raises:
            ValidationError:  File too large
            FileStorageError: Directory missing or not writable, disk full
        """
        self.validate_size(len(content))

        stored_name = self._generate_filename(filename)
        path = self.upload_dir / stored_name

        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store upload at %s: %s", path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(path), "os_error": str(e)},
            ) from e

        logger.info("Upload stored: %s (%d bytes)", stored_name, len(content))
        return f"{UPLOADS_URL_PREFIX}{stored_name}"

    def path_for(self, image_url: str) -> Optional[Path]:
        """
        Map a public upload URL back to its file, or None when the URL does
        not point inside upload_dir.
        """
        if not image_url or not image_url.startswith(UPLOADS_URL_PREFIX):
            return None
        path = (self.upload_dir / image_url[len(UPLOADS_URL_PREFIX):]).resolve()
        if path.parent != self.upload_dir:
            return None
        return path

    async def cleanup(self, image_url: str) -> None:
        """
        Remove a stored upload after the database write that would have
        referenced it failed.

        Best effort: a failure here is logged and never raised, since the
        original error is what the client needs to see.
        """
        path = self.path_for(image_url)
        if path is None:
            return
        try:
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up upload: %s", path.name)
            else:
                logger.debug("Cleanup: upload already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up upload %s: %s", path.name, str(e))
