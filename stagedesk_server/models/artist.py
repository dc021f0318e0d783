# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Artist model."""

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stagedesk_server.models.base import Base
from stagedesk_server.models.image import ImageMixin
from stagedesk_server.models.timestamp import TimestampMixin

ARTIST_STATUSES = ("active", "inactive", "pending")
SOCIAL_MEDIA_KEYS = ("instagram", "twitter", "youtube")


def empty_social_media() -> dict[str, str]:
    return {key: "" for key in SOCIAL_MEDIA_KEYS}


class Artist(Base, ImageMixin, TimestampMixin):
    """Performing artist managed from the dashboard."""

    __tablename__ = "artists"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    bio: Mapped[str] = mapped_column(Text, default="", nullable=False)
    genre: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    contact_email: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    contact_phone: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    social_media: Mapped[dict] = mapped_column(JSON, default=empty_social_media, nullable=False)
    status: Mapped[str] = mapped_column(String(16), default="active", nullable=False, index=True)

    events: Mapped[list["Event"]] = relationship(
        "Event",
        secondary="event_artists",
        back_populates="artists",
        # line-up rows are removed explicitly (and by ON DELETE CASCADE) when an artist is deleted
        passive_deletes=True,
    )
