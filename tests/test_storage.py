# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Image storage backend tests: local filesystem and Cloudinary (SDK calls patched)."""

from pathlib import Path

import cloudinary.exceptions
import cloudinary.uploader
import pytest

from stagedesk_server.config import Settings
from stagedesk_server.services.storage import (
    CloudinaryImageStorage,
    ImageStorageError,
    LocalImageStorage,
    build_image_storage,
)


async def test_local_upload_and_delete(tmp_path: Path):
    storage = LocalImageStorage(root=tmp_path, base_url="/media/", prefix="internal-management")
    stored = await storage.upload(b"png-bytes", "artists", "image/png")

    assert stored.public_id.startswith("internal-management/artists/")
    assert stored.public_id.endswith(".png")
    assert stored.url == f"/media/{stored.public_id}"
    path = tmp_path / stored.public_id
    assert path.read_bytes() == b"png-bytes"

    await storage.delete(stored.public_id)
    assert not path.exists()
    # Already gone is not an error
    await storage.delete(stored.public_id)


async def test_local_rejects_paths_outside_root(tmp_path: Path):
    storage = LocalImageStorage(root=tmp_path / "media", base_url="/media")
    with pytest.raises(ImageStorageError):
        await storage.delete("../outside.png")


def _cloudinary() -> CloudinaryImageStorage:
    return CloudinaryImageStorage(
        cloud_name="demo",
        api_key="key123",
        api_secret="abcd",
        prefix="internal-management",
        timeout=5.0,
    )


async def test_cloudinary_upload(monkeypatch):
    """Upload goes to <prefix>/<folder> with the configured credentials."""
    calls = []

    def fake_upload(file, **options):
        calls.append((file.read(), options))
        return {
            "public_id": "internal-management/events/abc",
            "secure_url": "https://res.cloudinary.com/demo/image/upload/internal-management/events/abc.png",
        }

    monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)
    stored = await _cloudinary().upload(b"png-bytes", "events", "image/png")

    assert stored.public_id == "internal-management/events/abc"
    assert stored.url.startswith("https://res.cloudinary.com/")
    data, options = calls[0]
    assert data == b"png-bytes"
    assert options["folder"] == "internal-management/events"
    assert options["cloud_name"] == "demo"
    assert options["api_key"] == "key123"
    assert options["api_secret"] == "abcd"
    assert options["timeout"] == 5.0


async def test_cloudinary_upload_error(monkeypatch):
    def fake_upload(file, **options):
        raise cloudinary.exceptions.Error("Invalid Signature")

    monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)
    with pytest.raises(ImageStorageError):
        await _cloudinary().upload(b"x", "artists", "image/png")


async def test_cloudinary_upload_incomplete_response(monkeypatch):
    monkeypatch.setattr(cloudinary.uploader, "upload", lambda file, **options: {"public_id": "only-id"})
    with pytest.raises(ImageStorageError):
        await _cloudinary().upload(b"x", "artists", "image/png")


async def test_cloudinary_delete(monkeypatch):
    calls = []

    def fake_destroy(public_id, **options):
        calls.append((public_id, options))
        return {"result": "ok"}

    monkeypatch.setattr(cloudinary.uploader, "destroy", fake_destroy)
    await _cloudinary().delete("internal-management/artists/abc")
    assert calls[0][0] == "internal-management/artists/abc"
    assert calls[0][1]["cloud_name"] == "demo"


async def test_cloudinary_delete_not_found_is_ok(monkeypatch):
    monkeypatch.setattr(cloudinary.uploader, "destroy", lambda public_id, **options: {"result": "not found"})
    await _cloudinary().delete("gone")


async def test_cloudinary_delete_unexpected_result(monkeypatch):
    monkeypatch.setattr(cloudinary.uploader, "destroy", lambda public_id, **options: {"result": "error"})
    with pytest.raises(ImageStorageError):
        await _cloudinary().delete("abc")


async def test_cloudinary_delete_error(monkeypatch):
    def fake_destroy(public_id, **options):
        raise cloudinary.exceptions.Error("timed out")

    monkeypatch.setattr(cloudinary.uploader, "destroy", fake_destroy)
    with pytest.raises(ImageStorageError):
        await _cloudinary().delete("abc")


def test_build_local_storage(tmp_path: Path):
    config = Settings(storage_backend="local", media_path=tmp_path, media_url="/media")
    storage = build_image_storage(config)
    assert isinstance(storage, LocalImageStorage)
    assert storage.prefix == "internal-management"


def test_build_cloudinary_storage():
    config = Settings(
        storage_backend="cloudinary",
        cloudinary_cloud_name="demo",
        cloudinary_api_key="key",
        cloudinary_api_secret="secret",
    )
    assert isinstance(build_image_storage(config), CloudinaryImageStorage)


def test_build_cloudinary_requires_credentials():
    config = Settings(
        storage_backend="cloudinary",
        cloudinary_cloud_name=None,
        cloudinary_api_key=None,
        cloudinary_api_secret=None,
    )
    with pytest.raises(RuntimeError):
        build_image_storage(config)


def test_build_unknown_backend():
    with pytest.raises(RuntimeError):
        build_image_storage(Settings(storage_backend="s3"))
