# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Artist endpoint tests: CRUD, validation, filters and image handling."""

import json

from httpx import AsyncClient

from conftest import create_artist, create_event


async def test_create_artist_json(client: AsyncClient):
    """POST /artists with JSON trims the name and fills defaults."""
    r = await client.post("/api/v1/artists", json={"name": "  Nova  ", "genre": "Jazz"})
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["name"] == "Nova"
    assert data["genre"] == "Jazz"
    assert data["status"] == "active"
    assert data["bio"] == ""
    assert data["social_media"] == {"instagram": "", "twitter": "", "youtube": ""}
    assert data["image"] is None
    assert "created_at" in data and "updated_at" in data


async def test_create_artist_requires_name(client: AsyncClient):
    r = await client.post("/api/v1/artists", json={"genre": "Jazz"})
    assert r.status_code == 400
    body = r.json()
    assert body["detail"] == "Validation failed"
    assert any(e["field"] == "name" for e in body["errors"])


async def test_create_artist_blank_name_rejected(client: AsyncClient):
    r = await client.post("/api/v1/artists", json={"name": "   "})
    assert r.status_code == 400


async def test_create_artist_invalid_contact(client: AsyncClient):
    """Bad e-mail and short phone numbers are rejected; empty values are fine."""
    r = await client.post("/api/v1/artists", json={"name": "A", "contact_email": "not-an-email"})
    assert r.status_code == 400
    assert any(e["field"].startswith("contact_email") for e in r.json()["errors"])

    r = await client.post("/api/v1/artists", json={"name": "B", "contact_phone": "12345"})
    assert r.status_code == 400
    assert any(e["field"].startswith("contact_phone") for e in r.json()["errors"])

    r = await client.post("/api/v1/artists", json={"name": "C", "contact_phone": "+1 (555) 123-4567"})
    assert r.status_code == 201
    r = await client.post("/api/v1/artists", json={"name": "D", "contact_email": "", "contact_phone": ""})
    assert r.status_code == 201


async def test_create_artist_invalid_status(client: AsyncClient):
    r = await client.post("/api/v1/artists", json={"name": "A", "status": "retired"})
    assert r.status_code == 400


async def test_create_artist_malformed_json(client: AsyncClient):
    r = await client.post(
        "/api/v1/artists", content=b"{not json", headers={"content-type": "application/json"}
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Request body must be valid JSON"


async def test_duplicate_artist_name_conflicts(client: AsyncClient):
    await create_artist(client, name="Nova")
    r = await client.post("/api/v1/artists", json={"name": "nova"})
    assert r.status_code == 409
    assert r.json()["detail"] == "An artist with this name already exists"


async def test_create_artist_multipart_with_image(client: AsyncClient, storage, png):
    """Multipart create uploads the image to the artists folder and parses social_media JSON."""
    r = await client.post(
        "/api/v1/artists",
        data={"name": "Echo", "bio": "", "social_media": json.dumps({"instagram": "@echo"})},
        files={"image": png},
    )
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["social_media"]["instagram"] == "@echo"
    assert data["social_media"]["twitter"] == ""
    public_id = data["image"]["public_id"]
    assert public_id.startswith("internal-management/artists/")
    assert data["image"]["url"].endswith(public_id)
    assert public_id in storage.files


async def test_create_artist_rejects_bad_image_type(client: AsyncClient, storage):
    r = await client.post(
        "/api/v1/artists",
        data={"name": "Echo"},
        files={"image": ("notes.txt", b"hello", "text/plain")},
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid file type. Only JPEG, PNG, GIF, and WebP images are allowed."
    assert storage.files == {}


async def test_create_artist_upload_failure(client: AsyncClient, storage, png):
    storage.fail_upload = True
    r = await client.post("/api/v1/artists", data={"name": "Echo"}, files={"image": png})
    assert r.status_code == 400
    assert r.json()["detail"] == "Failed to upload image to cloud storage"
    r = await client.get("/api/v1/artists")
    assert r.json()["pagination"]["total"] == 0


async def test_duplicate_name_discards_uploaded_image(client: AsyncClient, storage, png):
    await create_artist(client, name="Echo")
    r = await client.post("/api/v1/artists", data={"name": "ECHO"}, files={"image": png})
    assert r.status_code == 409
    assert storage.files == {}


async def test_list_artists_filters_and_pagination(client: AsyncClient):
    """GET /artists returns newest first, filters by status/search and paginates."""
    await create_artist(client, name="Alpha")
    await create_artist(client, name="Bravo", status="inactive")
    await create_artist(client, name="Charlie")

    r = await client.get("/api/v1/artists")
    assert r.status_code == 200
    body = r.json()
    assert [a["name"] for a in body["data"]] == ["Charlie", "Bravo", "Alpha"]
    assert body["pagination"] == {"page": 1, "limit": 10, "total": 3, "pages": 1}

    r = await client.get("/api/v1/artists", params={"status": "inactive"})
    assert [a["name"] for a in r.json()["data"]] == ["Bravo"]

    r = await client.get("/api/v1/artists", params={"search": "ALP"})
    assert [a["name"] for a in r.json()["data"]] == ["Alpha"]

    r = await client.get("/api/v1/artists", params={"limit": 2, "page": 2})
    body = r.json()
    assert [a["name"] for a in body["data"]] == ["Alpha"]
    assert body["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}


async def test_search_wildcards_match_literally(client: AsyncClient):
    """% and _ in a search term are plain characters, not LIKE wildcards."""
    await create_artist(client, name="Alpha")
    await create_artist(client, name="Bravo")

    for term in ("%", "_", "A%a"):
        r = await client.get("/api/v1/artists", params={"search": term})
        assert r.json()["data"] == [], term

    await create_artist(client, name="100% Live")
    await create_artist(client, name="Dj_Set")
    r = await client.get("/api/v1/artists", params={"search": "%"})
    assert [a["name"] for a in r.json()["data"]] == ["100% Live"]
    r = await client.get("/api/v1/artists", params={"search": "j_s"})
    assert [a["name"] for a in r.json()["data"]] == ["Dj_Set"]


async def test_get_artist(client: AsyncClient):
    artist = await create_artist(client, name="Nova")
    r = await client.get(f"/api/v1/artists/{artist['id']}")
    assert r.status_code == 200
    assert r.json()["data"]["name"] == "Nova"


async def test_get_artist_not_found(client: AsyncClient):
    r = await client.get("/api/v1/artists/999")
    assert r.status_code == 404
    assert r.json()["detail"] == "Artist not found"


async def test_update_artist_partial(client: AsyncClient):
    """PUT only changes the fields sent."""
    artist = await create_artist(client, name="Nova", genre="Jazz", bio="Quartet")
    r = await client.put(f"/api/v1/artists/{artist['id']}", json={"genre": "Rock"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["genre"] == "Rock"
    assert data["name"] == "Nova"
    assert data["bio"] == "Quartet"


async def test_update_artist_name_conflict(client: AsyncClient):
    await create_artist(client, name="Nova")
    other = await create_artist(client, name="Echo")
    r = await client.put(f"/api/v1/artists/{other['id']}", json={"name": "NOVA"})
    assert r.status_code == 409


async def test_update_artist_replaces_image(client: AsyncClient, storage, png):
    """A new image on PUT replaces the old one, which is deleted from storage."""
    r = await client.post("/api/v1/artists", data={"name": "Echo"}, files={"image": png})
    artist = r.json()["data"]
    old_id = artist["image"]["public_id"]

    r = await client.put(f"/api/v1/artists/{artist['id']}", data={"genre": "Pop"}, files={"image": png})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["genre"] == "Pop"
    assert data["image"]["public_id"] != old_id
    assert old_id in storage.deleted
    assert old_id not in storage.files


async def test_update_artist_not_found(client: AsyncClient):
    r = await client.put("/api/v1/artists/999", json={"genre": "Rock"})
    assert r.status_code == 404


async def test_delete_artist_removes_from_events(client: AsyncClient, storage, png):
    """Deleting an artist drops it from event line-ups and discards its image."""
    r = await client.post("/api/v1/artists", data={"name": "Echo"}, files={"image": png})
    artist = r.json()["data"]
    keep = await create_artist(client, name="Nova")
    event = await create_event(client, artists=[artist["id"], keep["id"]])

    r = await client.delete(f"/api/v1/artists/{artist['id']}")
    assert r.status_code == 200
    assert r.json() == {"message": "Artist deleted successfully"}
    assert artist["image"]["public_id"] in storage.deleted

    r = await client.get(f"/api/v1/artists/{artist['id']}")
    assert r.status_code == 404
    r = await client.get(f"/api/v1/events/{event['id']}")
    assert [a["name"] for a in r.json()["data"]["artists"]] == ["Nova"]


async def test_delete_artist_survives_storage_failure(client: AsyncClient, storage, png):
    r = await client.post("/api/v1/artists", data={"name": "Echo"}, files={"image": png})
    artist = r.json()["data"]
    storage.fail_delete = True
    r = await client.delete(f"/api/v1/artists/{artist['id']}")
    assert r.status_code == 200


async def test_artist_image_routes(client: AsyncClient, storage, png):
    """Upload, read and clear an artist image through the /image sub-resource."""
    artist = await create_artist(client, name="Nova")
    url = f"/api/v1/artists/{artist['id']}/image"

    r = await client.get(url)
    assert r.status_code == 404
    assert r.json()["detail"] == "No image found for this artist"

    r = await client.post(url, files={"image": png})
    assert r.status_code == 200
    image = r.json()["data"]["image"]
    assert image["public_id"] in storage.files

    r = await client.get(url)
    assert r.status_code == 200
    assert r.json()["data"] == image

    r = await client.delete(url)
    assert r.status_code == 200
    assert r.json() == {"message": "Artist image deleted successfully"}
    assert image["public_id"] not in storage.files

    r = await client.get(f"/api/v1/artists/{artist['id']}")
    assert r.json()["data"]["image"] is None


async def test_artist_image_upload_requires_file(client: AsyncClient, png):
    artist = await create_artist(client, name="Nova")
    r = await client.post(f"/api/v1/artists/{artist['id']}/image", files={"photo": png})
    assert r.status_code == 400
    assert r.json()["detail"] == "No file provided"


async def test_artist_image_too_large(client: AsyncClient, storage):
    from stagedesk_server.config import settings

    artist = await create_artist(client, name="Nova")
    big = b"\x00" * (settings.max_upload_bytes + 1)
    r = await client.post(f"/api/v1/artists/{artist['id']}/image", files={"image": ("big.png", big, "image/png")})
    assert r.status_code == 400
    assert r.json()["detail"] == "File size too large. Maximum size is 5MB."
    assert storage.files == {}
