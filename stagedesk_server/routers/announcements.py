# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Announcement API routes."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from stagedesk_server.api.schemas import (
    AnnouncementCreate,
    AnnouncementResponse,
    AnnouncementUpdate,
    Envelope,
    MessageResponse,
)
from stagedesk_server.database import get_db
from stagedesk_server.models import Announcement
from stagedesk_server.services import listings, records

router = APIRouter(prefix="/announcements", tags=["announcements"])


@router.get("", response_model=Envelope[list[AnnouncementResponse]])
async def list_announcements(
    is_active: bool | None = Query(None),
    db: AsyncSession = Depends(get_db),
) -> Envelope[list[AnnouncementResponse]]:
    """List announcements, newest first."""
    rows = await listings.list_announcements(db, is_active=is_active)
    return Envelope[list[AnnouncementResponse]](data=[AnnouncementResponse.model_validate(a) for a in rows])


@router.get("/active", response_model=Envelope[list[AnnouncementResponse]])
async def list_active_announcements(db: AsyncSession = Depends(get_db)) -> Envelope[list[AnnouncementResponse]]:
    """Active, unexpired announcements by priority (high first), then newest."""
    rows = await listings.active_announcements(db)
    return Envelope[list[AnnouncementResponse]](data=[AnnouncementResponse.model_validate(a) for a in rows])


@router.post("", response_model=Envelope[AnnouncementResponse], status_code=status.HTTP_201_CREATED)
async def create_announcement(
    data: AnnouncementCreate,
    db: AsyncSession = Depends(get_db),
) -> Envelope[AnnouncementResponse]:
    """Create an announcement."""
    announcement = Announcement(**data.model_dump())
    db.add(announcement)
    await db.commit()
    return Envelope[AnnouncementResponse](data=AnnouncementResponse.model_validate(announcement))


@router.get("/{announcement_id}", response_model=Envelope[AnnouncementResponse])
async def get_announcement(
    announcement_id: int,
    db: AsyncSession = Depends(get_db),
) -> Envelope[AnnouncementResponse]:
    """Get announcement by ID."""
    announcement = await records.get_announcement(db, announcement_id)
    return Envelope[AnnouncementResponse](data=AnnouncementResponse.model_validate(announcement))


@router.put("/{announcement_id}", response_model=Envelope[AnnouncementResponse])
async def update_announcement(
    announcement_id: int,
    data: AnnouncementUpdate,
    db: AsyncSession = Depends(get_db),
) -> Envelope[AnnouncementResponse]:
    """Update the given fields. ``expires_at: null`` removes the expiry."""
    announcement = await records.get_announcement(db, announcement_id)
    for field, value in data.changes().items():
        setattr(announcement, field, value)
    await db.commit()
    announcement = await records.get_announcement(db, announcement_id, fresh=True)
    return Envelope[AnnouncementResponse](data=AnnouncementResponse.model_validate(announcement))


@router.delete("/{announcement_id}", response_model=MessageResponse)
async def delete_announcement(
    announcement_id: int,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Delete an announcement."""
    announcement = await records.get_announcement(db, announcement_id)
    await db.delete(announcement)
    await db.commit()
    return MessageResponse(message="Announcement deleted successfully")
