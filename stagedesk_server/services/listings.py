# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Read queries shared by the REST API and the dashboard pages."""

from datetime import datetime, timezone

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from stagedesk_server.models import Announcement, Artist, Event
from stagedesk_server.models.announcement import priority_rank

UPCOMING_LIMIT = 10
ACTIVE_ANNOUNCEMENTS_LIMIT = 10


def _contains(value: str) -> str:
    """LIKE pattern matching ``value`` literally anywhere in the column."""
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


async def list_artists(
    db: AsyncSession,
    *,
    status: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Artist], int]:
    """Page of artists, newest first. Returns (artists, total matching)."""
    conditions = []
    if status:
        conditions.append(Artist.status == status)
    if search:
        conditions.append(Artist.name.ilike(_contains(search), escape="\\"))
    total = await db.scalar(select(func.count()).select_from(Artist).where(*conditions)) or 0
    result = await db.execute(
        select(Artist)
        .where(*conditions)
        .order_by(Artist.created_at.desc(), Artist.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def list_events(
    db: AsyncSession,
    *,
    status: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Event], int]:
    """Page of events by start date, artists loaded. Returns (events, total matching)."""
    conditions = []
    if status:
        conditions.append(Event.status == status)
    if search:
        pattern = _contains(search)
        conditions.append(or_(Event.title.ilike(pattern, escape="\\"), Event.venue.ilike(pattern, escape="\\")))
    total = await db.scalar(select(func.count()).select_from(Event).where(*conditions)) or 0
    result = await db.execute(
        select(Event)
        .options(selectinload(Event.artists))
        .where(*conditions)
        .order_by(Event.start_date.asc(), Event.id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def upcoming_events(db: AsyncSession, limit: int = UPCOMING_LIMIT) -> list[Event]:
    """Events not yet started that are upcoming or ongoing, soonest first."""
    now = datetime.now(timezone.utc)
    result = await db.execute(
        select(Event)
        .options(selectinload(Event.artists))
        .where(Event.start_date >= now, Event.status.in_(("upcoming", "ongoing")))
        .order_by(Event.start_date.asc(), Event.id.asc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def events_between(db: AsyncSession, start: datetime, end: datetime) -> list[Event]:
    """Events overlapping [start, end). Events without end_date last for their start instant."""
    result = await db.execute(
        select(Event)
        .options(selectinload(Event.artists))
        .where(
            Event.start_date < end,
            func.coalesce(Event.end_date, Event.start_date) >= start,
        )
        .order_by(Event.start_date.asc(), Event.id.asc())
    )
    return list(result.scalars().all())


async def list_announcements(
    db: AsyncSession,
    *,
    is_active: bool | None = None,
    priority: str | None = None,
) -> list[Announcement]:
    """All announcements, newest first."""
    q = select(Announcement)
    if priority:
        q = q.where(Announcement.priority == priority)
    if is_active is not None:
        q = q.where(Announcement.is_active == is_active)
    result = await db.execute(q.order_by(Announcement.created_at.desc(), Announcement.id.desc()))
    return list(result.scalars().all())


async def active_announcements(db: AsyncSession, limit: int = ACTIVE_ANNOUNCEMENTS_LIMIT) -> list[Announcement]:
    """Active, unexpired announcements: highest priority first, then newest."""
    now = datetime.now(timezone.utc)
    result = await db.execute(
        select(Announcement)
        .where(
            Announcement.is_active == True,  # noqa: E712
            or_(Announcement.expires_at.is_(None), Announcement.expires_at >= now),
        )
        .order_by(priority_rank().desc(), Announcement.created_at.desc(), Announcement.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def artist_choices(db: AsyncSession) -> list[Artist]:
    """Every artist by name, for line-up pickers."""
    result = await db.execute(select(Artist).order_by(Artist.name.asc()))
    return list(result.scalars().all())
