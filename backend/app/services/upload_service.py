"""
WellNest Backend — Image Upload Service
========================================

What:  Validates, stores, describes and deletes uploaded images.
Why:   Centralizes all file system operations with security checks.
How:   Checks the declared MIME type, then the size, then the type found in
       the leading bytes (python-magic), then writes the bytes with aiofiles
       under a generated name in UPLOAD_DIR.
Who:   Called by the /api/upload routes.

Security Model:
    1. MIME allow-list:  rejected before a single byte is written
    2. Size limit:       413 before a single byte is written
    3. Content sniffing: the leading bytes must also identify an allowed image,
                         so a renamed PDF is refused even with an image Content-Type
    4. Generated names:  stored filenames never contain client input apart
                         from the extension, which is itself checked
    5. Filename check:   info/delete refuse names containing "..", "/" or "\\"
                         before touching the filesystem

Stored filename format:
    <field>-<epoch milliseconds>-<12 hex chars><ext>
    e.g. image-1718000000000-a1b2c3d4e5f6.jpg
"""

import logging
import secrets
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os

from app.config import settings
from app.exceptions import FileStorageError, NotFoundError, PayloadTooLargeError, ValidationError
from app.schemas.upload import ImageInfo, UploadResult

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
ALLOWED_MIME_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}

# libmagic only needs the file header
SNIFF_BYTES = 2048

UNSAFE_SEQUENCES = ("..", "/", "\\")

PUBLIC_PREFIX = "/uploads"


class UploadService:
    """
    Manages the lifecycle of uploaded images.

    Directory Structure:
        uploads/
        ├── image-1718000000000-a1b2c3d4e5f6.jpg
        └── image-1718000005000-0f1e2d3c4b5a.png
    """

    def __init__(self, upload_dir: Optional[str] = None, max_bytes: Optional[int] = None):
        self.upload_dir = Path(upload_dir or settings.upload_dir).resolve()
        self.max_bytes = max_bytes or settings.max_file_upload

    def ensure_directory(self) -> None:
        """Called once from the lifespan; idempotent."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Upload directory ready at %s", self.upload_dir)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_mime_type(self, content_type: Optional[str]) -> str:
        mime = (content_type or "").split(";")[0].strip().lower()
        if mime not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message="Only image files are allowed (jpeg, jpg, png, gif, webp)",
                field="image",
                context={"content_type": mime, "allowed": sorted(ALLOWED_MIME_TYPES)},
            )
        return mime

    def validate_size(self, size: int) -> None:
        if size > self.max_bytes:
            raise PayloadTooLargeError(self.max_bytes, context={"actual_size": size})

    def detect_content_type(self, content: bytes) -> str:
        """
        What:  Identifies the file type from its leading bytes.
        Why:   The declared Content-Type is chosen by the client; renaming a
               PDF to .jpg and labelling it image/jpeg must not get it stored.
        """
        try:
            import magic
            detected = magic.from_buffer(content[:SNIFF_BYTES], mime=True)
        except Exception as e:
            logger.error("MIME type detection failed: %s", e)
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )

        if detected not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message="File content is not a supported image (jpeg, png, gif, webp)",
                field="image",
                context={"detected": detected},
            )
        return detected

    def validate_filename(self, filename: str) -> str:
        """Reject anything that could step outside the upload directory."""
        if not filename or any(seq in filename for seq in UNSAFE_SEQUENCES):
            raise ValidationError("Invalid filename", field="filename")
        return filename

    def _extension_for(self, original_name: Optional[str], mime: str) -> str:
        ext = Path(original_name or "").suffix.lower()
        if ext in ALLOWED_EXTENSIONS:
            return ext
        return ALLOWED_MIME_TYPES[mime]

    def generate_filename(self, field: str, extension: str) -> str:
        epoch_ms = int(time.time() * 1000)
        return f"{field}-{epoch_ms}-{secrets.token_hex(6)}{extension}"

    # ── Operations ────────────────────────────────────────────────────────

    async def save_image(
        self,
        content: bytes,
        original_name: Optional[str],
        content_type: Optional[str],
        field: str = "image",
    ) -> UploadResult:
        """
        Validation order:
            1. Declared MIME type: cheapest, and the most common mistake
            2. Size: content was read with a cap of max_bytes + 1
            3. Detected type from the leading bytes
            4. Write
        """
        mime = self.validate_mime_type(content_type)
        self.validate_size(len(content))
        detected = self.detect_content_type(content)

        filename = self.generate_filename(field, self._extension_for(original_name, detected))
        path = self.upload_dir / filename
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store upload at %s: %s", path, e)
            await self.cleanup_file(str(path))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"os_error": str(e)},
            )

        logger.info("Image stored: %s (%d bytes, %s)", filename, len(content), mime)
        return UploadResult(
            filename=filename,
            filePath=f"{PUBLIC_PREFIX}/{filename}",
            originalName=original_name or filename,
            size=len(content),
            mimetype=mime,
        )

    async def image_info(self, filename: str) -> ImageInfo:
        self.validate_filename(filename)
        path = self.upload_dir / filename
        try:
            stat = await aiofiles.os.stat(path)
        except FileNotFoundError:
            raise NotFoundError(resource="file", resource_id=filename)
        except OSError as e:
            raise FileStorageError(context={"os_error": str(e)})

        return ImageInfo(
            filename=filename,
            size=stat.st_size,
            created=datetime.fromtimestamp(stat.st_ctime, tz=timezone.utc),
            modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            filePath=f"{PUBLIC_PREFIX}/{filename}",
        )

    async def delete_image(self, filename: str) -> None:
        self.validate_filename(filename)
        path = self.upload_dir / filename
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            raise NotFoundError(resource="file", resource_id=filename)
        except OSError as e:
            logger.error("Failed to delete %s: %s", filename, e)
            raise FileStorageError(
                message="Failed to delete image",
                context={"os_error": str(e)},
            )
        logger.info("Image deleted: %s", filename)

    async def cleanup_file(self, file_path: str) -> None:
        """
        Best-effort removal of a partially written file. Failures are logged,
        never raised: the caller is already reporting a more useful error.
        """
        try:
            if await aiofiles.os.path.exists(file_path):
                await aiofiles.os.remove(file_path)
                logger.info("Cleaned up file: %s", Path(file_path).name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, e)


# ── Singleton Instance ────────────────────────────────────────────────────
upload_service = UploadService()
