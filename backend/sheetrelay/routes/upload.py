"""
SheetRelay Backend — Image Upload Route
=========================================

What:  POST /upload — stores one image in Google Drive, returns its link.
How:   Receives multipart/form-data with an `image` field, reads it into
       memory (bounded by MAX_FILE_SIZE) and delegates to the image storage.

Typical client flow:
    1. POST /upload (image)                 → {"success": true, "driveLink": ...}
    2. POST /save-image-link (sku, link)    → writes the link into column J
    3. GET  /data                           → link comes back as a direct image URL
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile

from sheetrelay.dependencies import get_image_storage
from sheetrelay.schemas.records import ErrorResponse, UploadResponse
from sheetrelay.services.storage_base import ImageStorage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Upload"])


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={
        400: {"description": "Invalid file type or size", "model": ErrorResponse},
        500: {"description": "Drive not configured or upload failed", "model": ErrorResponse},
    },
    summary="Upload an image to Google Drive",
)
async def upload_image(
    image: UploadFile = File(..., description="Image file (PNG, JPEG, GIF or WebP)"),
    storage: ImageStorage = Depends(get_image_storage),
) -> UploadResponse:
    content = await image.read()

    logger.info(
        "Received upload: filename=%s, size=%d bytes",
        image.filename or "unknown",
        len(content),
    )

    try:
        link = await storage.store_image(
            filename=image.filename or "upload.jpg",
            content=content,
            content_length=image.size,
        )
    finally:
        await image.close()

    return UploadResponse(success=True, drive_link=link)
