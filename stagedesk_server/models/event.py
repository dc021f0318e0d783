# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Event model and its artist line-up."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stagedesk_server.models.base import Base
from stagedesk_server.models.image import ImageMixin
from stagedesk_server.models.timestamp import TimestampMixin

EVENT_STATUSES = ("upcoming", "ongoing", "completed", "cancelled")

event_artists = Table(
    "event_artists",
    Base.metadata,
    Column("event_id", ForeignKey("events.id", ondelete="CASCADE"), primary_key=True),
    Column("artist_id", ForeignKey("artists.id", ondelete="CASCADE"), primary_key=True),
)


class Event(Base, ImageMixin, TimestampMixin):
    """Scheduled event with venue, ticketing numbers and performing artists."""

    __tablename__ = "events"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    venue: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(String(16), default="upcoming", nullable=False, index=True)
    capacity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    ticket_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    tickets_sold: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    artists: Mapped[list["Artist"]] = relationship(
        "Artist",
        secondary=event_artists,
        back_populates="events",
        order_by="Artist.name",
    )
