# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Stored image reference columns shared by artists and events."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column


class ImageMixin:
    """Storage identifier + public URL of an externally hosted image."""

    image_public_id: Mapped[str] = mapped_column(String(512), default="", server_default="", nullable=False)
    image_url: Mapped[str] = mapped_column(String(1024), default="", server_default="", nullable=False)

    @property
    def has_image(self) -> bool:
        return bool(self.image_public_id or self.image_url)

    def clear_image(self) -> None:
        self.image_public_id = ""
        self.image_url = ""

    @property
    def image(self) -> dict[str, str] | None:
        if not self.has_image:
            return None
        return {"public_id": self.image_public_id, "url": self.image_url}
