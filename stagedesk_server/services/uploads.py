# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Image upload validation and best-effort cleanup around the storage backend."""

import logging

from fastapi import HTTPException, UploadFile, status

from stagedesk_server.config import settings
from stagedesk_server.services.storage import ImageStorage, ImageStorageError, StoredImage

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"})


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


async def read_image(upload: UploadFile, max_bytes: int | None = None) -> tuple[bytes, str]:
    """Read an uploaded image, enforcing MIME type and size. Returns (data, content_type)."""
    limit = max_bytes if max_bytes is not None else settings.max_upload_bytes
    content_type = (upload.content_type or "").split(";")[0].strip().lower()
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise _bad_request("Invalid file type. Only JPEG, PNG, GIF, and WebP images are allowed.")
    data = await upload.read(limit + 1)
    if not data:
        raise _bad_request("No file provided")
    if len(data) > limit:
        raise _bad_request(f"File size too large. Maximum size is {limit // (1024 * 1024)}MB.")
    return data, content_type


async def store_image(storage: ImageStorage, upload: UploadFile, folder: str) -> StoredImage:
    """Validate and upload an image; storage failures become 400 responses."""
    data, content_type = await read_image(upload)
    try:
        stored = await storage.upload(data, folder, content_type)
    except ImageStorageError as e:
        logger.error("Image upload to %s failed: %s", folder, e)
        raise _bad_request("Failed to upload image to cloud storage") from e
    logger.info("Stored image %s (%d bytes)", stored.public_id, len(data))
    return stored


async def discard_image(storage: ImageStorage, public_id: str | None) -> None:
    """Delete a stored image, logging instead of failing the request."""
    if not public_id:
        return
    try:
        await storage.delete(public_id)
    except ImageStorageError as e:
        logger.warning("Could not delete stored image %s: %s", public_id, e)
