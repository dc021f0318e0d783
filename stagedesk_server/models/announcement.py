# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Announcement model."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text, case
from sqlalchemy.orm import Mapped, mapped_column

from stagedesk_server.models.base import Base
from stagedesk_server.models.timestamp import TimestampMixin

ANNOUNCEMENT_PRIORITIES = ("low", "medium", "high")


class Announcement(Base, TimestampMixin):
    """Internal notice shown on the dashboard until it expires or is deactivated."""

    __tablename__ = "announcements"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    priority: Mapped[str] = mapped_column(String(16), default="medium", nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


def priority_rank():
    """SQL expression ranking priorities high=3, medium=2, low=1 (for ORDER BY ... DESC)."""
    return case(
        (Announcement.priority == "high", 3),
        (Announcement.priority == "medium", 2),
        else_=1,
    )
