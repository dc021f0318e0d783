# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Web dashboard routes (server-rendered): lists, calendar and record forms.

Forms post back to the page that rendered them. On success the browser is
redirected (303) to the list; on a validation or storage error the form is
rendered again with the submitted values and the error messages.
"""

from datetime import datetime, timezone
from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from stagedesk_server.api.schemas import AnnouncementCreate, ArtistCreate, EventCreate, Pagination, ensure_utc
from stagedesk_server.config import settings
from stagedesk_server.database import get_db
from stagedesk_server.models import Announcement, Artist, Event
from stagedesk_server.models.announcement import ANNOUNCEMENT_PRIORITIES
from stagedesk_server.models.artist import ARTIST_STATUSES, SOCIAL_MEDIA_KEYS
from stagedesk_server.models.event import EVENT_STATUSES
from stagedesk_server.services import listings, records
from stagedesk_server.services.calendar import build_month_grid, month_bounds, shift_month
from stagedesk_server.services.stats import collect_dashboard_stats
from stagedesk_server.services.storage import ImageStorage, get_image_storage

router = APIRouter(prefix="/dashboard", tags=["dashboard-web"])

templates_dir = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(templates_dir))


def _format_datetime(value: datetime | None, fmt: str = "%Y-%m-%d %H:%M") -> str:
    if value is None:
        return ""
    return ensure_utc(value).strftime(fmt)


def _is_expired(expires_at: datetime | None) -> bool:
    return expires_at is not None and ensure_utc(expires_at) < datetime.now(timezone.utc)


templates.env.filters["datetime"] = _format_datetime
templates.env.tests["expired"] = _is_expired


def _choice(value: str | None, allowed: tuple[str, ...]) -> str | None:
    # Filter forms submit "" for "all"
    return value if value in allowed else None


@router.get("", response_class=HTMLResponse)
async def dashboard_home(request: Request, db: AsyncSession = Depends(get_db)):
    """Statistics, upcoming events and active announcements."""
    stats = await collect_dashboard_stats(db)
    upcoming = await listings.upcoming_events(db, limit=5)
    announcements = await listings.active_announcements(db, limit=5)
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "stats": stats,
            "upcoming": upcoming,
            "announcements": announcements,
        },
    )


@router.get("/artists", response_class=HTMLResponse)
async def artists_page(
    request: Request,
    status: str | None = Query(None),
    search: str | None = Query(None),
    page: int = Query(1, ge=1),
    db: AsyncSession = Depends(get_db),
):
    """Paginated artist table."""
    status = _choice(status, ARTIST_STATUSES)
    limit = settings.default_page_size
    artists, total = await listings.list_artists(db, status=status, search=search, page=page, limit=limit)
    return templates.TemplateResponse(
        request,
        "artists.html",
        {
            "artists": artists,
            "pagination": Pagination.build(page, limit, total),
            "statuses": ARTIST_STATUSES,
            "status": status,
            "search": search or "",
        },
    )


@router.get("/events", response_class=HTMLResponse)
async def events_page(
    request: Request,
    status: str | None = Query(None),
    search: str | None = Query(None),
    page: int = Query(1, ge=1),
    db: AsyncSession = Depends(get_db),
):
    """Paginated event table."""
    status = _choice(status, EVENT_STATUSES)
    limit = settings.default_page_size
    events, total = await listings.list_events(db, status=status, search=search, page=page, limit=limit)
    return templates.TemplateResponse(
        request,
        "events.html",
        {
            "events": events,
            "pagination": Pagination.build(page, limit, total),
            "statuses": EVENT_STATUSES,
            "status": status,
            "search": search or "",
        },
    )


@router.get("/events/calendar", response_class=HTMLResponse)
async def calendar_page(
    request: Request,
    year: int | None = Query(None, ge=1970, le=9999),
    month: int | None = Query(None, ge=1, le=12),
    db: AsyncSession = Depends(get_db),
):
    """Month grid of events."""
    today = datetime.now(timezone.utc)
    year = year or today.year
    month = month or today.month
    start, end = month_bounds(year, month)
    events = await listings.events_between(db, start, end)
    prev_year, prev_month = shift_month(year, month, -1)
    next_year, next_month = shift_month(year, month, 1)
    return templates.TemplateResponse(
        request,
        "calendar.html",
        {
            "weeks": build_month_grid(year, month, events),
            "title": start.strftime("%B %Y"),
            "today": today.date(),
            "prev": {"year": prev_year, "month": prev_month},
            "next": {"year": next_year, "month": next_month},
        },
    )


@router.get("/announcements", response_class=HTMLResponse)
async def announcements_page(
    request: Request,
    priority: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """All announcements with active/expired badges."""
    priority = _choice(priority, ANNOUNCEMENT_PRIORITIES)
    announcements = await listings.list_announcements(db, priority=priority)
    return templates.TemplateResponse(
        request,
        "announcements.html",
        {"announcements": announcements, "priorities": ANNOUNCEMENT_PRIORITIES, "priority": priority},
    )


# Record forms

def _filled(values: dict[str, str]) -> dict[str, str]:
    """Form values the user filled in; blank inputs fall back to schema defaults."""
    return {k: v for k, v in values.items() if v.strip()}


def _upload(image: UploadFile | None) -> UploadFile | None:
    # Browsers submit an empty file part when nothing was chosen
    return image if image is not None and image.filename else None


def _local_input(value: datetime | None) -> str:
    """Value for an <input type="datetime-local"> (UTC)."""
    return ensure_utc(value).strftime("%Y-%m-%dT%H:%M") if value else ""


def _error_messages(exc: ValidationError | HTTPException) -> list[str]:
    if isinstance(exc, HTTPException):
        return [str(exc.detail)]
    messages = []
    for err in exc.errors():
        loc = err.get("loc") or ()
        message = f"{loc[0]}: {err['msg']}" if loc else err["msg"]
        if message not in messages:
            messages.append(message)
    return messages


def _see_other(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def _render_form(
    request: Request,
    name: str,
    context: dict,
    exc: ValidationError | HTTPException | None = None,
) -> HTMLResponse:
    status_code = 200
    context.setdefault("errors", [])
    if exc is not None:
        context["errors"] = _error_messages(exc)
        status_code = exc.status_code if isinstance(exc, HTTPException) else 400
    return templates.TemplateResponse(request, name, context, status_code=status_code)


def _image_info(record: Artist | Event | None) -> dict | None:
    # Plain values only: a rollback expires the ORM object before the form is re-rendered
    if record is None:
        return None
    return {"id": record.id, "image_url": record.image_url}


# Artists
def _artist_values(artist: Artist | None) -> dict[str, str]:
    if artist is None:
        return {"status": "active"}
    social = artist.social_media or {}
    return {
        "name": artist.name,
        "bio": artist.bio,
        "genre": artist.genre,
        "contact_email": artist.contact_email,
        "contact_phone": artist.contact_phone,
        "status": artist.status,
        **{key: social.get(key, "") for key in SOCIAL_MEDIA_KEYS},
    }


def _artist_payload(values: dict[str, str]) -> ArtistCreate:
    raw: dict = _filled({k: v for k, v in values.items() if k not in SOCIAL_MEDIA_KEYS})
    raw["social_media"] = {key: values.get(key, "").strip() for key in SOCIAL_MEDIA_KEYS}
    return ArtistCreate.model_validate(raw)


def _artist_context(values: dict, record: dict | None) -> dict:
    return {"values": values, "record": record, "statuses": ARTIST_STATUSES}


@router.get("/artists/new", response_class=HTMLResponse)
async def new_artist_page(request: Request):
    return _render_form(request, "artist_form.html", _artist_context(_artist_values(None), None))


@router.post("/artists/new", response_class=HTMLResponse)
async def create_artist_submit(
    request: Request,
    name: str = Form(""),
    bio: str = Form(""),
    genre: str = Form(""),
    contact_email: str = Form(""),
    contact_phone: str = Form(""),
    instagram: str = Form(""),
    twitter: str = Form(""),
    youtube: str = Form(""),
    status: str = Form("active"),
    image: UploadFile | None = File(None),
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
):
    """Create an artist from the dashboard form."""
    values = {
        "name": name, "bio": bio, "genre": genre, "contact_email": contact_email,
        "contact_phone": contact_phone, "instagram": instagram, "twitter": twitter,
        "youtube": youtube, "status": status,
    }
    try:
        await records.create_artist(db, storage, _artist_payload(values), _upload(image))
    except (ValidationError, HTTPException) as e:
        await db.rollback()
        return _render_form(request, "artist_form.html", _artist_context(values, None), e)
    return _see_other("/dashboard/artists")


@router.get("/artists/{artist_id}/edit", response_class=HTMLResponse)
async def edit_artist_page(request: Request, artist_id: int, db: AsyncSession = Depends(get_db)):
    artist = await records.get_artist(db, artist_id)
    return _render_form(request, "artist_form.html", _artist_context(_artist_values(artist), _image_info(artist)))


@router.post("/artists/{artist_id}/edit", response_class=HTMLResponse)
async def update_artist_submit(
    request: Request,
    artist_id: int,
    name: str = Form(""),
    bio: str = Form(""),
    genre: str = Form(""),
    contact_email: str = Form(""),
    contact_phone: str = Form(""),
    instagram: str = Form(""),
    twitter: str = Form(""),
    youtube: str = Form(""),
    status: str = Form("active"),
    image: UploadFile | None = File(None),
    remove_image: bool = Form(False),
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
):
    """Save every field of the artist form; optionally replace or remove the image."""
    artist = await records.get_artist(db, artist_id)
    record = _image_info(artist)
    values = {
        "name": name, "bio": bio, "genre": genre, "contact_email": contact_email,
        "contact_phone": contact_phone, "instagram": instagram, "twitter": twitter,
        "youtube": youtube, "status": status,
    }
    try:
        data = _artist_payload(values)
        await records.update_artist(
            db, storage, artist, data.model_dump(), _upload(image), remove_image=remove_image
        )
    except (ValidationError, HTTPException) as e:
        await db.rollback()
        return _render_form(request, "artist_form.html", _artist_context(values, record), e)
    return _see_other("/dashboard/artists")


@router.post("/artists/{artist_id}/delete")
async def delete_artist_submit(
    artist_id: int,
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
):
    artist = await records.get_artist(db, artist_id)
    await records.delete_artist(db, storage, artist)
    return _see_other("/dashboard/artists")


# Events
def _event_values(event: Event | None) -> dict:
    if event is None:
        return {"status": "upcoming", "artists": []}
    return {
        "title": event.title,
        "description": event.description,
        "venue": event.venue,
        "location": event.location,
        "start_date": _local_input(event.start_date),
        "end_date": _local_input(event.end_date),
        "status": event.status,
        "capacity": str(event.capacity),
        "ticket_price": f"{float(event.ticket_price):.2f}",
        "tickets_sold": str(event.tickets_sold),
        "artists": [a.id for a in event.artists],
    }


async def _event_context(db: AsyncSession, values: dict, record: dict | None) -> dict:
    return {
        "values": values,
        "record": record,
        "statuses": EVENT_STATUSES,
        "artist_choices": await listings.artist_choices(db),
    }


def _event_payload(values: dict) -> EventCreate:
    raw: dict = _filled({k: v for k, v in values.items() if k != "artists"})
    raw["artists"] = values["artists"]
    return EventCreate.model_validate(raw)


@router.get("/events/new", response_class=HTMLResponse)
async def new_event_page(request: Request, db: AsyncSession = Depends(get_db)):
    return _render_form(request, "event_form.html", await _event_context(db, _event_values(None), None))


@router.post("/events/new", response_class=HTMLResponse)
async def create_event_submit(
    request: Request,
    title: str = Form(""),
    description: str = Form(""),
    venue: str = Form(""),
    location: str = Form(""),
    start_date: str = Form(""),
    end_date: str = Form(""),
    status: str = Form("upcoming"),
    capacity: str = Form(""),
    ticket_price: str = Form(""),
    tickets_sold: str = Form(""),
    artists: list[int] = Form([]),
    image: UploadFile | None = File(None),
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
):
    """Create an event from the dashboard form."""
    values = {
        "title": title, "description": description, "venue": venue, "location": location,
        "start_date": start_date, "end_date": end_date, "status": status, "capacity": capacity,
        "ticket_price": ticket_price, "tickets_sold": tickets_sold, "artists": artists,
    }
    try:
        await records.create_event(db, storage, _event_payload(values), _upload(image))
    except (ValidationError, HTTPException) as e:
        await db.rollback()
        return _render_form(request, "event_form.html", await _event_context(db, values, None), e)
    return _see_other("/dashboard/events")


@router.get("/events/{event_id}/edit", response_class=HTMLResponse)
async def edit_event_page(request: Request, event_id: int, db: AsyncSession = Depends(get_db)):
    event = await records.get_event(db, event_id)
    context = await _event_context(db, _event_values(event), _image_info(event))
    return _render_form(request, "event_form.html", context)


@router.post("/events/{event_id}/edit", response_class=HTMLResponse)
async def update_event_submit(
    request: Request,
    event_id: int,
    title: str = Form(""),
    description: str = Form(""),
    venue: str = Form(""),
    location: str = Form(""),
    start_date: str = Form(""),
    end_date: str = Form(""),
    status: str = Form("upcoming"),
    capacity: str = Form(""),
    ticket_price: str = Form(""),
    tickets_sold: str = Form(""),
    artists: list[int] = Form([]),
    image: UploadFile | None = File(None),
    remove_image: bool = Form(False),
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
):
    """Save every field of the event form; unticked artists leave the line-up."""
    event = await records.get_event(db, event_id)
    record = _image_info(event)
    values = {
        "title": title, "description": description, "venue": venue, "location": location,
        "start_date": start_date, "end_date": end_date, "status": status, "capacity": capacity,
        "ticket_price": ticket_price, "tickets_sold": tickets_sold, "artists": artists,
    }
    try:
        data = _event_payload(values)
        await records.update_event(
            db, storage, event, data.model_dump(), _upload(image), remove_image=remove_image
        )
    except (ValidationError, HTTPException) as e:
        await db.rollback()
        return _render_form(request, "event_form.html", await _event_context(db, values, record), e)
    return _see_other("/dashboard/events")


@router.post("/events/{event_id}/delete")
async def delete_event_submit(
    event_id: int,
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
):
    event = await records.get_event(db, event_id)
    await records.delete_event(db, storage, event)
    return _see_other("/dashboard/events")


# Announcements
def _announcement_values(announcement: Announcement | None) -> dict:
    if announcement is None:
        return {"priority": "medium", "is_active": True}
    return {
        "title": announcement.title,
        "content": announcement.content,
        "author": announcement.author,
        "priority": announcement.priority,
        "is_active": announcement.is_active,
        "expires_at": _local_input(announcement.expires_at),
    }


def _announcement_payload(values: dict) -> AnnouncementCreate:
    raw: dict = _filled({k: v for k, v in values.items() if k != "is_active"})
    raw["is_active"] = values["is_active"]
    return AnnouncementCreate.model_validate(raw)


def _announcement_context(values: dict, record: dict | None) -> dict:
    return {"values": values, "record": record, "priorities": ANNOUNCEMENT_PRIORITIES}


@router.get("/announcements/new", response_class=HTMLResponse)
async def new_announcement_page(request: Request):
    context = _announcement_context(_announcement_values(None), None)
    return _render_form(request, "announcement_form.html", context)


@router.post("/announcements/new", response_class=HTMLResponse)
async def create_announcement_submit(
    request: Request,
    title: str = Form(""),
    content: str = Form(""),
    author: str = Form(""),
    priority: str = Form("medium"),
    is_active: bool = Form(False),
    expires_at: str = Form(""),
    db: AsyncSession = Depends(get_db),
):
    """Create an announcement from the dashboard form."""
    values = {
        "title": title, "content": content, "author": author,
        "priority": priority, "is_active": is_active, "expires_at": expires_at,
    }
    try:
        data = _announcement_payload(values)
    except ValidationError as e:
        return _render_form(request, "announcement_form.html", _announcement_context(values, None), e)
    db.add(Announcement(**data.model_dump()))
    await db.commit()
    return _see_other("/dashboard/announcements")


@router.get("/announcements/{announcement_id}/edit", response_class=HTMLResponse)
async def edit_announcement_page(request: Request, announcement_id: int, db: AsyncSession = Depends(get_db)):
    announcement = await records.get_announcement(db, announcement_id)
    context = _announcement_context(_announcement_values(announcement), {"id": announcement.id})
    return _render_form(request, "announcement_form.html", context)


@router.post("/announcements/{announcement_id}/edit", response_class=HTMLResponse)
async def update_announcement_submit(
    request: Request,
    announcement_id: int,
    title: str = Form(""),
    content: str = Form(""),
    author: str = Form(""),
    priority: str = Form("medium"),
    is_active: bool = Form(False),
    expires_at: str = Form(""),
    db: AsyncSession = Depends(get_db),
):
    """Save every field of the announcement form."""
    announcement = await records.get_announcement(db, announcement_id)
    values = {
        "title": title, "content": content, "author": author,
        "priority": priority, "is_active": is_active, "expires_at": expires_at,
    }
    try:
        data = _announcement_payload(values)
    except ValidationError as e:
        context = _announcement_context(values, {"id": announcement_id})
        return _render_form(request, "announcement_form.html", context, e)
    for field, value in data.model_dump().items():
        setattr(announcement, field, value)
    await db.commit()
    return _see_other("/dashboard/announcements")


@router.post("/announcements/{announcement_id}/delete")
async def delete_announcement_submit(announcement_id: int, db: AsyncSession = Depends(get_db)):
    announcement = await records.get_announcement(db, announcement_id)
    await db.delete(announcement)
    await db.commit()
    return _see_other("/dashboard/announcements")
