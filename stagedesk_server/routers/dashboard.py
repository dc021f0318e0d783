# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Dashboard API - aggregate statistics."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from stagedesk_server.api.schemas import DashboardStats, Envelope
from stagedesk_server.database import get_db
from stagedesk_server.services.stats import collect_dashboard_stats

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=Envelope[DashboardStats])
async def get_dashboard_stats(db: AsyncSession = Depends(get_db)) -> Envelope[DashboardStats]:
    """Counts of artists, events and announcements plus ticketing totals for upcoming events."""
    return Envelope[DashboardStats](data=await collect_dashboard_stats(db))
