# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Artist API routes - CRUD and image management."""

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from stagedesk_server.api.payload import read_payload
from stagedesk_server.api.schemas import (
    ArtistCreate,
    ArtistResponse,
    ArtistStatus,
    ArtistUpdate,
    Envelope,
    ImageRef,
    MessageResponse,
    Page,
    Pagination,
)
from stagedesk_server.config import settings
from stagedesk_server.database import get_db
from stagedesk_server.services import listings, records
from stagedesk_server.services.storage import ImageStorage, get_image_storage

router = APIRouter(prefix="/artists", tags=["artists"])


@router.get("", response_model=Page[ArtistResponse])
async def list_artists(
    status: ArtistStatus | None = Query(None),
    search: str | None = Query(None, description="Case-insensitive name filter"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncSession = Depends(get_db),
) -> Page[ArtistResponse]:
    """List artists, newest first, with optional status filter and pagination."""
    artists, total = await listings.list_artists(db, status=status, search=search, page=page, limit=limit)
    return Page[ArtistResponse](
        data=[ArtistResponse.model_validate(a) for a in artists],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("", response_model=Envelope[ArtistResponse], status_code=status.HTTP_201_CREATED)
async def create_artist(
    request: Request,
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
) -> Envelope[ArtistResponse]:
    """Create an artist from JSON or multipart form data (optional ``image`` file)."""
    data, image = await read_payload(request, ArtistCreate)
    artist = await records.create_artist(db, storage, data, image)
    return Envelope[ArtistResponse](data=ArtistResponse.model_validate(artist))


@router.get("/{artist_id}", response_model=Envelope[ArtistResponse])
async def get_artist(
    artist_id: int,
    db: AsyncSession = Depends(get_db),
) -> Envelope[ArtistResponse]:
    """Get artist by ID."""
    artist = await records.get_artist(db, artist_id)
    return Envelope[ArtistResponse](data=ArtistResponse.model_validate(artist))


@router.put("/{artist_id}", response_model=Envelope[ArtistResponse])
async def update_artist(
    artist_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
) -> Envelope[ArtistResponse]:
    """Update the given fields. A new ``image`` replaces the stored one."""
    data, image = await read_payload(request, ArtistUpdate)
    artist = await records.get_artist(db, artist_id)
    artist = await records.update_artist(db, storage, artist, data.changes(), image)
    return Envelope[ArtistResponse](data=ArtistResponse.model_validate(artist))


@router.delete("/{artist_id}", response_model=MessageResponse)
async def delete_artist(
    artist_id: int,
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
) -> MessageResponse:
    """Delete an artist, remove it from event line-ups and drop its stored image."""
    artist = await records.get_artist(db, artist_id)
    await records.delete_artist(db, storage, artist)
    return MessageResponse(message="Artist deleted successfully")


@router.post("/{artist_id}/image", response_model=Envelope[ArtistResponse])
async def upload_artist_image(
    artist_id: int,
    image: UploadFile | None = File(None),
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
) -> Envelope[ArtistResponse]:
    """Upload or replace the artist's image (multipart field ``image``)."""
    artist = await records.get_artist(db, artist_id)
    if image is None or not image.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided")
    artist = await records.update_artist(db, storage, artist, {}, image)
    return Envelope[ArtistResponse](data=ArtistResponse.model_validate(artist))


@router.get("/{artist_id}/image", response_model=Envelope[ImageRef])
async def get_artist_image(
    artist_id: int,
    db: AsyncSession = Depends(get_db),
) -> Envelope[ImageRef]:
    """Get the artist's stored image reference."""
    artist = await records.get_artist(db, artist_id)
    if not artist.has_image:
        raise HTTPException(status_code=404, detail="No image found for this artist")
    return Envelope[ImageRef](data=ImageRef(public_id=artist.image_public_id, url=artist.image_url))


@router.delete("/{artist_id}/image", response_model=MessageResponse)
async def delete_artist_image(
    artist_id: int,
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
) -> MessageResponse:
    """Clear the artist's image and delete it from storage."""
    artist = await records.get_artist(db, artist_id)
    if not artist.has_image:
        raise HTTPException(status_code=404, detail="No image found for this artist")
    await records.update_artist(db, storage, artist, {}, remove_image=True)
    return MessageResponse(message="Artist image deleted successfully")
