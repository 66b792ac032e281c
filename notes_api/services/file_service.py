"""
Notes API — File Storage Service (Upload Handler)
==================================================

What:  Stores uploaded files in the upload directory and names them.
How:   Optional extension/size checks, then an async write with aiofiles
       under a generated filename.
Who:   Called by POST /upload; files are served back by the /uploads mount.

Filename scheme:
    <millisecond-timestamp>-<8 hex chars>-<original filename>
    e.g. 1718000000000-3f9c2a1b-cours.pdf

    The timestamp prefix keeps files sortable by upload time; the random
    segment keeps two uploads of the same name in the same millisecond apart.
    Only the final path component of the client filename is kept.

Limits:
    None by default. `max_size` and `allowed_extensions` are applied only
    when configured (MAX_UPLOAD_SIZE, ALLOWED_UPLOAD_EXTENSIONS).
"""

import logging
import time
import uuid
from pathlib import Path
from typing import Iterable, Optional

import aiofiles

from notes_api.exceptions import FileStorageError, UploadError

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "upload"


class FileService:
    """
    Manages upload validation and storage.

    Directory Structure:
        uploads/
        ├── 1718000000000-3f9c2a1b-cours.pdf
        └── 1718000000412-9e01bb7c-photo.png

    Args:
        upload_dir: Directory that receives uploaded files (created if missing).
        max_size: Optional per-file byte limit.
        allowed_extensions: Optional allow-list such as [".png", ".pdf"];
                            empty accepts every extension.
    """

    def __init__(
        self,
        upload_dir: str,
        max_size: Optional[int] = None,
        allowed_extensions: Iterable[str] = (),
    ):
        self.upload_dir = Path(upload_dir).resolve()
        self.max_size = max_size
        self.allowed_extensions = {ext.lower() for ext in allowed_extensions}
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with upload_dir=%s", self.upload_dir)

    def validate_extension(self, filename: str) -> None:
        """
        Check the extension against the allow-list, if one is configured.

        Raises:
            UploadError if the extension is not allowed.
        """
        if not self.allowed_extensions:
            return

        ext = Path(filename).suffix.lower()
        if ext not in self.allowed_extensions:
            raise UploadError(
                message=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(self.allowed_extensions))}"
                ),
                context={"extension": ext, "allowed": sorted(self.allowed_extensions)},
            )

    def validate_size(self, actual_size: int) -> None:
        """
        Check the file size against `max_size`, if one is configured.

        Raises:
            UploadError if the file is larger than the limit.
        """
        if self.max_size is None or actual_size <= self.max_size:
            return

        raise UploadError(
            message=(
                f"File size ({actual_size} bytes) exceeds maximum of "
                f"{self.max_size} bytes."
            ),
            context={"max_size": self.max_size, "actual_size": actual_size},
        )

    @staticmethod
    def sanitize_filename(filename: Optional[str]) -> str:
        """Keep only the last path component of a client-supplied filename."""
        name = Path((filename or "").replace("\\", "/")).name.strip()
        if name in ("", ".", ".."):
            return DEFAULT_FILENAME
        return name

    def generate_filename(self, original: Optional[str]) -> str:
        timestamp_ms = int(time.time() * 1000)
        suffix = uuid.uuid4().hex[:8]
        return f"{timestamp_ms}-{suffix}-{self.sanitize_filename(original)}"

    async def store_upload(self, filename: Optional[str], content: bytes) -> str:
        """
        Validate and write an uploaded file.

        Args:
            filename: Original client filename (may be None)
            content: Raw file bytes

        Returns:
            The generated filename, relative to the upload directory.

        Raises:
            UploadError: A configured cap was violated (→ 400)
            FileStorageError: The write failed (→ 500)
        """
        self.validate_extension(self.sanitize_filename(filename))
        self.validate_size(len(content))

        stored_name = self.generate_filename(filename)
        destination = self.upload_dir / stored_name

        try:
            async with aiofiles.open(destination, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", destination, str(e))
            raise FileStorageError(
                message=f"Failed to save uploaded file: {e.strerror or e}",
                context={"path": str(destination)},
            )

        logger.info("File stored: %s (%d bytes)", stored_name, len(content))
        return stored_name
