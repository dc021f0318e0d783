# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Dashboard statistics: record counts and ticketing totals."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stagedesk_server.api.schemas import CountStats, DashboardStats, EventStats, TicketingStats
from stagedesk_server.models import Announcement, Artist, Event


async def _count(db: AsyncSession, model, *conditions) -> int:
    return await db.scalar(select(func.count()).select_from(model).where(*conditions)) or 0


async def ticketing_totals(db: AsyncSession, status: str = "upcoming") -> TicketingStats:
    """Capacity, tickets sold and revenue (sold x price) summed over events with ``status``."""
    row = (
        await db.execute(
            select(
                func.coalesce(func.sum(func.coalesce(Event.capacity, 0)), 0),
                func.coalesce(func.sum(func.coalesce(Event.tickets_sold, 0)), 0),
                func.coalesce(
                    func.sum(func.coalesce(Event.tickets_sold, 0) * func.coalesce(Event.ticket_price, 0)),
                    0,
                ),
            ).where(Event.status == status)
        )
    ).one()
    capacity, sold, revenue = row
    return TicketingStats(capacity=int(capacity), sold=int(sold), revenue=round(float(revenue), 2))


async def collect_dashboard_stats(db: AsyncSession) -> DashboardStats:
    """Aggregate statistics for the dashboard. Queries run sequentially on one session."""
    return DashboardStats(
        artists=CountStats(
            total=await _count(db, Artist),
            active=await _count(db, Artist, Artist.status == "active"),
        ),
        events=EventStats(
            total=await _count(db, Event),
            upcoming=await _count(db, Event, Event.status == "upcoming"),
            ticketing=await ticketing_totals(db),
        ),
        announcements=CountStats(
            total=await _count(db, Announcement),
            active=await _count(db, Announcement, Announcement.is_active == True),  # noqa: E712
        ),
    )
