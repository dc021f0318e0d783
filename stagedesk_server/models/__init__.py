# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Database models."""

from stagedesk_server.models.base import Base
from stagedesk_server.models.artist import Artist
from stagedesk_server.models.event import Event, event_artists
from stagedesk_server.models.announcement import Announcement

__all__ = [
    "Base",
    "Artist",
    "Event",
    "event_artists",
    "Announcement",
]
