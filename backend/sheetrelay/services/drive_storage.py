"""
SheetRelay Backend — Google Drive Image Storage
=================================================

What:  Validates uploaded images and stores them in a Google Drive folder.
Why:   Product rows reference their picture by URL; Drive is the image host.
How:   Extension, size and MIME checks run first (cheap → expensive), then
       the bytes are uploaded to DRIVE_FOLDER_ID and optionally shared
       publicly. The Drive "view" link is returned; GET /data later rewrites
       it into a direct image URL (see services/links.py).
Who:   Called by POST /upload.

Validation order:
    1. Extension check:  no bytes inspected
    2. Size check:       Content-Length first, then actual byte count
    3. MIME check:       python-magic reads the file header (magic numbers)
"""

import logging
import uuid
from pathlib import Path
from typing import Optional

from starlette.concurrency import run_in_threadpool

from sheetrelay.config import settings
from sheetrelay.exceptions import FileStorageError, ValidationError
from sheetrelay.services.google_client import GoogleWorkspaceClient, google_client
from sheetrelay.services.storage_base import ImageStorage

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}

DRIVE_VIEW_URL = "https://drive.google.com/file/d/{file_id}/view"


class DriveImageStorage(ImageStorage):
    """
    Image storage backed by a Google Drive folder.

    Stored name:  <8-char uuid>_<original filename>
    Returned:     webViewLink (https://drive.google.com/file/d/<id>/view?...)
    """

    def __init__(
        self,
        client: Optional[GoogleWorkspaceClient] = None,
        folder_id: Optional[str] = None,
        make_public: Optional[bool] = None,
    ):
        self.client = client or google_client
        self.folder_id = settings.drive_folder_id if folder_id is None else folder_id
        self.make_public = settings.drive_make_public if make_public is None else make_public

    def validate_extension(self, filename: str) -> str:
        """Returns the normalized extension; raises ValidationError if not allowed."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="image",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        max_mb = settings.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty.", field="image")

        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB. Please upload a smaller image.",
                field="image",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="image",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def validate_mime_type(self, content: bytes) -> str:
        """
        Sniff the real MIME type from the file header.

        Renamed files (malware.exe → photo.jpg) pass the extension check but
        fail here.
        """
        import magic

        try:
            mime_type = magic.from_buffer(content, mime=True)
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=(
                    f"File content type '{mime_type}' is not supported. "
                    "The file must be a valid image (PNG, JPEG, GIF or WebP)."
                ),
                field="image",
                context={"detected_mime": mime_type, "allowed": list(ALLOWED_MIME_TYPES)},
            )
        return mime_type

    async def store_image(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> str:
        self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        mime_type = self.validate_mime_type(content)

        if not self.folder_id:
            raise FileStorageError(
                message="Image uploads are disabled: DRIVE_FOLDER_ID is not configured.",
            )

        stored_name = f"{uuid.uuid4().hex[:8]}_{Path(filename).name}"
        created = await run_in_threadpool(
            self.client.upload_file,
            stored_name,
            content,
            mime_type,
            self.folder_id,
        )
        file_id = created["id"]

        if self.make_public:
            await run_in_threadpool(self.client.make_public, file_id)

        link = created.get("webViewLink") or DRIVE_VIEW_URL.format(file_id=file_id)
        logger.info("Image stored: %s (%d bytes) → %s", stored_name, len(content), file_id)
        return link

    def health_check(self) -> str:
        return "configured" if self.folder_id else "not_configured"


# ── Singleton Instance ────────────────────────────────────────────────────
drive_storage = DriveImageStorage()
