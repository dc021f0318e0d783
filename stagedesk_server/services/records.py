# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Record writes shared by the REST API and the dashboard forms.

Every write that carries an image follows the same order: upload first, commit
the record, then delete the image it replaced. A failed commit deletes the
freshly uploaded image instead.
"""

import logging
from decimal import Decimal
from typing import Any

from fastapi import HTTPException, UploadFile, status
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from stagedesk_server.api.schemas import ArtistCreate, EventCreate, ensure_utc
from stagedesk_server.models import Announcement, Artist, Event, event_artists
from stagedesk_server.services.storage import ImageStorage, StoredImage
from stagedesk_server.services.uploads import discard_image, store_image

logger = logging.getLogger(__name__)

ARTIST_FOLDER = "artists"
EVENT_FOLDER = "events"
DUPLICATE_NAME = "An artist with this name already exists"


async def get_artist(db: AsyncSession, artist_id: int, *, fresh: bool = False) -> Artist:
    artist = await db.get(Artist, artist_id, populate_existing=fresh)
    if not artist:
        raise HTTPException(status_code=404, detail="Artist not found")
    return artist


async def get_event(db: AsyncSession, event_id: int, *, fresh: bool = False) -> Event:
    q = select(Event).options(selectinload(Event.artists)).where(Event.id == event_id)
    if fresh:
        q = q.execution_options(populate_existing=True)
    event = (await db.execute(q)).scalar_one_or_none()
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


async def get_announcement(db: AsyncSession, announcement_id: int, *, fresh: bool = False) -> Announcement:
    announcement = await db.get(Announcement, announcement_id, populate_existing=fresh)
    if not announcement:
        raise HTTPException(status_code=404, detail="Announcement not found")
    return announcement


async def ensure_name_available(db: AsyncSession, name: str, exclude_id: int | None = None) -> None:
    q = select(func.count()).select_from(Artist).where(func.lower(Artist.name) == name.lower())
    if exclude_id is not None:
        q = q.where(Artist.id != exclude_id)
    if await db.scalar(q):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_NAME)


async def resolve_artists(db: AsyncSession, artist_ids: list[int]) -> list[Artist]:
    """Load the artists for a line-up, rejecting ids that do not exist."""
    unique_ids = list(dict.fromkeys(artist_ids))
    if not unique_ids:
        return []
    result = await db.execute(select(Artist).where(Artist.id.in_(unique_ids)))
    by_id = {a.id: a for a in result.scalars().all()}
    missing = [i for i in unique_ids if i not in by_id]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown artist id(s): {', '.join(str(i) for i in missing)}",
        )
    return [by_id[i] for i in unique_ids]


async def _swap_image(
    storage: ImageStorage,
    record: Artist | Event,
    image: UploadFile | None,
    folder: str,
    remove: bool = False,
) -> tuple[StoredImage | None, str | None]:
    """Put a new image on ``record`` or clear it. Returns (uploaded image, public id it replaced)."""
    previous = record.image_public_id or None
    if image is not None:
        stored = await store_image(storage, image, folder)
        record.image_public_id = stored.public_id
        record.image_url = stored.url
        return stored, previous
    if remove and record.has_image:
        record.clear_image()
        return None, previous
    return None, None


async def _commit(
    db: AsyncSession,
    storage: ImageStorage,
    stored: StoredImage | None,
    conflict_detail: str | None = None,
) -> None:
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        await discard_image(storage, stored.public_id if stored else None)
        if conflict_detail:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=conflict_detail) from e
        raise
    except Exception:
        await discard_image(storage, stored.public_id if stored else None)
        raise


# Artists
async def create_artist(
    db: AsyncSession,
    storage: ImageStorage,
    data: ArtistCreate,
    image: UploadFile | None = None,
) -> Artist:
    await ensure_name_available(db, data.name)
    artist = Artist(**data.model_dump())
    stored, _ = await _swap_image(storage, artist, image, ARTIST_FOLDER)
    db.add(artist)
    await _commit(db, storage, stored, DUPLICATE_NAME)
    logger.info("Created artist %s (%s)", artist.id, artist.name)
    return artist


async def update_artist(
    db: AsyncSession,
    storage: ImageStorage,
    artist: Artist,
    changes: dict[str, Any],
    image: UploadFile | None = None,
    *,
    remove_image: bool = False,
) -> Artist:
    """Apply ``changes``; a new ``image`` replaces the stored one, ``remove_image`` clears it."""
    if "name" in changes and changes["name"] != artist.name:
        await ensure_name_available(db, changes["name"], exclude_id=artist.id)
    for field, value in changes.items():
        setattr(artist, field, value)
    stored, replaced = await _swap_image(storage, artist, image, ARTIST_FOLDER, remove_image)
    await _commit(db, storage, stored, DUPLICATE_NAME)
    await discard_image(storage, replaced)
    return await get_artist(db, artist.id, fresh=True)


async def delete_artist(db: AsyncSession, storage: ImageStorage, artist: Artist) -> None:
    """Delete an artist, remove it from event line-ups and drop its stored image."""
    artist_id = artist.id
    image_id = artist.image_public_id
    await db.execute(delete(event_artists).where(event_artists.c.artist_id == artist_id))
    await db.delete(artist)
    await db.commit()
    await discard_image(storage, image_id)
    logger.info("Deleted artist %s", artist_id)


# Events
async def create_event(
    db: AsyncSession,
    storage: ImageStorage,
    data: EventCreate,
    image: UploadFile | None = None,
) -> Event:
    fields = data.model_dump(exclude={"artists", "ticket_price"})
    event = Event(**fields, ticket_price=Decimal(str(data.ticket_price)))
    event.artists = await resolve_artists(db, data.artists)
    stored, _ = await _swap_image(storage, event, image, EVENT_FOLDER)
    db.add(event)
    await _commit(db, storage, stored)
    logger.info("Created event %s (%s)", event.id, event.title)
    return await get_event(db, event.id, fresh=True)


async def update_event(
    db: AsyncSession,
    storage: ImageStorage,
    event: Event,
    changes: dict[str, Any],
    image: UploadFile | None = None,
    *,
    remove_image: bool = False,
) -> Event:
    """Apply ``changes``; ``artists`` replaces the line-up. Image handling as for artists."""
    changes = dict(changes)
    start = changes.get("start_date", event.start_date)
    end = changes.get("end_date", event.end_date)
    if start is not None and end is not None and ensure_utc(end) < ensure_utc(start):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_date must not be before start_date",
        )
    if "artists" in changes:
        event.artists = await resolve_artists(db, changes.pop("artists"))
    if "ticket_price" in changes:
        changes["ticket_price"] = Decimal(str(changes["ticket_price"]))
    for field, value in changes.items():
        setattr(event, field, value)
    stored, replaced = await _swap_image(storage, event, image, EVENT_FOLDER, remove_image)
    await _commit(db, storage, stored)
    await discard_image(storage, replaced)
    return await get_event(db, event.id, fresh=True)


async def delete_event(db: AsyncSession, storage: ImageStorage, event: Event) -> None:
    """Delete an event (its line-up rows go with it) and drop its stored image."""
    event_id = event.id
    image_id = event.image_public_id
    await db.delete(event)
    await db.commit()
    await discard_image(storage, image_id)
    logger.info("Deleted event %s", event_id)
