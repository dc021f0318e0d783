# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Image storage backends: local filesystem and Cloudinary."""

import asyncio
import io
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import cloudinary.exceptions
import cloudinary.uploader

from stagedesk_server.config import Settings, settings

logger = logging.getLogger(__name__)

EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}


class ImageStorageError(Exception):
    """Upload or deletion against the storage provider failed."""


@dataclass(frozen=True)
class StoredImage:
    """Storage identifier and retrievable URL of an uploaded image."""

    public_id: str
    url: str


class ImageStorage(ABC):
    """Uploads images into a folder and deletes them by public id."""

    def __init__(self, prefix: str = ""):
        self.prefix = prefix.strip("/")

    def folder_path(self, folder: str) -> str:
        return f"{self.prefix}/{folder}" if self.prefix else folder

    @abstractmethod
    async def upload(self, data: bytes, folder: str, content_type: str) -> StoredImage:
        ...

    @abstractmethod
    async def delete(self, public_id: str) -> None:
        ...


class LocalImageStorage(ImageStorage):
    """Writes images under a media directory served by the app itself."""

    def __init__(self, root: Path, base_url: str, prefix: str = ""):
        super().__init__(prefix)
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _path_for(self, public_id: str) -> Path:
        root = self.root.resolve()
        path = (root / public_id).resolve()
        if root not in path.parents:
            raise ImageStorageError(f"Refusing to touch {public_id!r} outside the media directory")
        return path

    async def upload(self, data: bytes, folder: str, content_type: str) -> StoredImage:
        ext = EXTENSIONS.get(content_type, "bin")
        public_id = f"{self.folder_path(folder)}/{uuid.uuid4().hex}.{ext}"
        path = self._path_for(public_id)
        try:
            await asyncio.to_thread(_write_file, path, data)
        except OSError as e:
            raise ImageStorageError(f"Could not write {public_id}: {e}") from e
        return StoredImage(public_id=public_id, url=f"{self.base_url}/{public_id}")

    async def delete(self, public_id: str) -> None:
        if not public_id:
            return
        path = self._path_for(public_id)
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as e:
            raise ImageStorageError(f"Could not delete {public_id}: {e}") from e


def _write_file(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


class CloudinaryImageStorage(ImageStorage):
    """Uploads and deletions through the Cloudinary SDK (blocking calls run in a thread)."""

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        prefix: str = "",
        timeout: float = 30.0,
    ):
        super().__init__(prefix)
        self.options = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
            "timeout": timeout,
        }

    async def upload(self, data: bytes, folder: str, content_type: str) -> StoredImage:
        try:
            result = await asyncio.to_thread(
                cloudinary.uploader.upload,
                io.BytesIO(data),
                folder=self.folder_path(folder),
                resource_type="image",
                **self.options,
            )
        except cloudinary.exceptions.Error as e:
            raise ImageStorageError(f"Cloudinary upload failed: {e}") from e
        public_id = result.get("public_id")
        url = result.get("secure_url")
        if not public_id or not url:
            raise ImageStorageError("Invalid response from cloud storage")
        return StoredImage(public_id=public_id, url=url)

    async def delete(self, public_id: str) -> None:
        if not public_id:
            return
        try:
            result = await asyncio.to_thread(
                cloudinary.uploader.destroy,
                public_id,
                resource_type="image",
                **self.options,
            )
        except cloudinary.exceptions.Error as e:
            raise ImageStorageError(f"Cloudinary destroy failed for {public_id}: {e}") from e
        outcome = result.get("result")
        if outcome not in ("ok", "not found"):
            raise ImageStorageError(f"Cloudinary destroy returned {outcome!r} for {public_id}")


def build_image_storage(config: Settings) -> ImageStorage:
    """Create the storage backend selected by STORAGE_BACKEND."""
    backend = config.storage_backend.lower()
    if backend == "local":
        return LocalImageStorage(
            root=config.media_path,
            base_url=config.media_url,
            prefix=config.storage_folder_prefix,
        )
    if backend == "cloudinary":
        if not (config.cloudinary_cloud_name and config.cloudinary_api_key and config.cloudinary_api_secret):
            raise RuntimeError(
                "Cloudinary storage needs CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET"
            )
        return CloudinaryImageStorage(
            cloud_name=config.cloudinary_cloud_name,
            api_key=config.cloudinary_api_key,
            api_secret=config.cloudinary_api_secret,
            prefix=config.storage_folder_prefix,
            timeout=config.cloudinary_timeout_seconds,
        )
    raise RuntimeError(f"Unknown STORAGE_BACKEND {config.storage_backend!r} (expected local or cloudinary)")


@lru_cache(maxsize=1)
def get_image_storage() -> ImageStorage:
    """FastAPI dependency returning the configured storage backend."""
    storage = build_image_storage(settings)
    logger.info("Image storage backend: %s", type(storage).__name__)
    return storage
