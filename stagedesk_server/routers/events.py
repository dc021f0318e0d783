# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Event API routes - CRUD, upcoming, calendar and image management."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from stagedesk_server.api.payload import read_payload
from stagedesk_server.api.schemas import (
    Envelope,
    EventCreate,
    EventResponse,
    EventStatus,
    EventUpdate,
    ImageRef,
    MessageResponse,
    Page,
    Pagination,
)
from stagedesk_server.config import settings
from stagedesk_server.database import get_db
from stagedesk_server.models import Event
from stagedesk_server.services import listings, records
from stagedesk_server.services.calendar import month_bounds
from stagedesk_server.services.storage import ImageStorage, get_image_storage

router = APIRouter(prefix="/events", tags=["events"])


def _to_response(event: Event) -> EventResponse:
    return EventResponse.model_validate(event)


@router.get("", response_model=Page[EventResponse])
async def list_events(
    status: EventStatus | None = Query(None),
    search: str | None = Query(None, description="Case-insensitive title/venue filter"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncSession = Depends(get_db),
) -> Page[EventResponse]:
    """List events by start date with optional status filter and pagination."""
    events, total = await listings.list_events(db, status=status, search=search, page=page, limit=limit)
    return Page[EventResponse](
        data=[_to_response(e) for e in events],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/upcoming", response_model=Envelope[list[EventResponse]])
async def list_upcoming_events(db: AsyncSession = Depends(get_db)) -> Envelope[list[EventResponse]]:
    """Next events (upcoming or ongoing) that have not started yet."""
    events = await listings.upcoming_events(db)
    return Envelope[list[EventResponse]](data=[_to_response(e) for e in events])


@router.get("/calendar", response_model=Envelope[list[EventResponse]])
async def list_calendar_events(
    year: int | None = Query(None, ge=1970, le=9999),
    month: int | None = Query(None, ge=1, le=12),
    db: AsyncSession = Depends(get_db),
) -> Envelope[list[EventResponse]]:
    """Events overlapping a month (defaults to the current month)."""
    today = datetime.now(timezone.utc)
    start, end = month_bounds(year or today.year, month or today.month)
    events = await listings.events_between(db, start, end)
    return Envelope[list[EventResponse]](data=[_to_response(e) for e in events])


@router.post("", response_model=Envelope[EventResponse], status_code=status.HTTP_201_CREATED)
async def create_event(
    request: Request,
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
) -> Envelope[EventResponse]:
    """Create an event from JSON or multipart form data (optional ``image`` file)."""
    data, image = await read_payload(request, EventCreate)
    event = await records.create_event(db, storage, data, image)
    return Envelope[EventResponse](data=_to_response(event))


@router.get("/{event_id}", response_model=Envelope[EventResponse])
async def get_event(
    event_id: int,
    db: AsyncSession = Depends(get_db),
) -> Envelope[EventResponse]:
    """Get event by ID with its artists."""
    event = await records.get_event(db, event_id)
    return Envelope[EventResponse](data=_to_response(event))


@router.put("/{event_id}", response_model=Envelope[EventResponse])
async def update_event(
    event_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
) -> Envelope[EventResponse]:
    """Update the given fields. ``artists`` replaces the line-up; a new ``image`` replaces the stored one."""
    data, image = await read_payload(request, EventUpdate)
    event = await records.get_event(db, event_id)
    event = await records.update_event(db, storage, event, data.changes(), image)
    return Envelope[EventResponse](data=_to_response(event))


@router.delete("/{event_id}", response_model=MessageResponse)
async def delete_event(
    event_id: int,
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
) -> MessageResponse:
    """Delete an event and drop its stored image."""
    event = await records.get_event(db, event_id)
    await records.delete_event(db, storage, event)
    return MessageResponse(message="Event deleted successfully")


@router.post("/{event_id}/image", response_model=Envelope[EventResponse])
async def upload_event_image(
    event_id: int,
    image: UploadFile | None = File(None),
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
) -> Envelope[EventResponse]:
    """Upload or replace the event's image (multipart field ``image``)."""
    event = await records.get_event(db, event_id)
    if image is None or not image.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided")
    event = await records.update_event(db, storage, event, {}, image)
    return Envelope[EventResponse](data=_to_response(event))


@router.get("/{event_id}/image", response_model=Envelope[ImageRef])
async def get_event_image(
    event_id: int,
    db: AsyncSession = Depends(get_db),
) -> Envelope[ImageRef]:
    """Get the event's stored image reference."""
    event = await records.get_event(db, event_id)
    if not event.has_image:
        raise HTTPException(status_code=404, detail="No image found for this event")
    return Envelope[ImageRef](data=ImageRef(public_id=event.image_public_id, url=event.image_url))


@router.delete("/{event_id}/image", response_model=MessageResponse)
async def delete_event_image(
    event_id: int,
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
) -> MessageResponse:
    """Clear the event's image and delete it from storage."""
    event = await records.get_event(db, event_id)
    if not event.has_image:
        raise HTTPException(status_code=404, detail="No image found for this event")
    await records.update_event(db, storage, event, {}, remove_image=True)
    return MessageResponse(message="Event image deleted successfully")
