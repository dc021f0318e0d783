# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pytest fixtures. Tests run against a throwaway SQLite database and in-memory image storage."""

import os
import tempfile
from pathlib import Path

_tmp = Path(tempfile.mkdtemp(prefix="stagedesk-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmp / 'test.db'}"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["MEDIA_PATH"] = str(_tmp / "media")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from stagedesk_server.database import drop_db, init_db  # noqa: E402
from stagedesk_server.main import app  # noqa: E402
from stagedesk_server.services.storage import (  # noqa: E402
    ImageStorage,
    ImageStorageError,
    StoredImage,
    get_image_storage,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class MemoryImageStorage(ImageStorage):
    """Keeps uploads in a dict. Set fail_upload / fail_delete to simulate provider errors."""

    def __init__(self, prefix: str = "internal-management"):
        super().__init__(prefix)
        self.files: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_upload = False
        self.fail_delete = False
        self._counter = 0

    async def upload(self, data: bytes, folder: str, content_type: str) -> StoredImage:
        if self.fail_upload:
            raise ImageStorageError("upload refused")
        self._counter += 1
        public_id = f"{self.folder_path(folder)}/img{self._counter}"
        self.files[public_id] = data
        return StoredImage(public_id=public_id, url=f"https://cdn.test/{public_id}")

    async def delete(self, public_id: str) -> None:
        self.deleted.append(public_id)
        if self.fail_delete:
            raise ImageStorageError("delete refused")
        self.files.pop(public_id, None)


@pytest.fixture
async def database():
    await init_db()
    yield
    await drop_db()


@pytest.fixture
def storage():
    store = MemoryImageStorage()
    app.dependency_overrides[get_image_storage] = lambda: store
    yield store
    app.dependency_overrides.pop(get_image_storage, None)


@pytest.fixture
async def client(database, storage):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def png():
    """Multipart file tuple for a small PNG upload."""
    return ("cover.png", PNG_BYTES, "image/png")


async def create_artist(client: AsyncClient, **fields) -> dict:
    body = {"name": "Test Artist", **fields}
    r = await client.post("/api/v1/artists", json=body)
    assert r.status_code == 201, r.text
    return r.json()["data"]


async def create_event(client: AsyncClient, **fields) -> dict:
    body = {"title": "Test Event", "venue": "Main Hall", "start_date": "2030-05-10T20:00:00Z", **fields}
    r = await client.post("/api/v1/events", json=body)
    assert r.status_code == 201, r.text
    return r.json()["data"]


async def create_announcement(client: AsyncClient, **fields) -> dict:
    body = {"title": "Notice", "content": "Details", **fields}
    r = await client.post("/api/v1/announcements", json=body)
    assert r.status_code == 201, r.text
    return r.json()["data"]
