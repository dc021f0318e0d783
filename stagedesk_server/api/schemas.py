# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pydantic schemas for API request/response."""

import math
import re
from datetime import datetime, timezone
from typing import Annotated, Any, ClassVar, Generic, Literal, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

ArtistStatus = Literal["active", "inactive", "pending"]
EventStatus = Literal["upcoming", "ongoing", "completed", "cancelled"]
AnnouncementPriority = Literal["low", "medium", "high"]

T = TypeVar("T")

_PHONE_RE = re.compile(r"^[\d\s\-+()]+$")

# Column limits: 32-bit INTEGER and NUMERIC(10, 2)
MAX_COUNT = 2_147_483_647
MAX_PRICE = 99_999_999.99


def ensure_utc(value: datetime) -> datetime:
    """Naive datetimes are taken as UTC; aware ones are converted to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


def _required_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


def _valid_phone(value: str) -> str:
    value = value.strip()
    if not value:
        return value
    digits = re.sub(r"\D", "", value)
    if not _PHONE_RE.match(value) or len(digits) < 10:
        raise ValueError("must be a valid phone number with at least 10 digits")
    return value


RequiredText = Annotated[str, AfterValidator(_required_text)]
Phone = Annotated[str, AfterValidator(_valid_phone)]
OptionalEmail = EmailStr | Literal[""]


class UpdateSchema(BaseModel):
    """Partial update body: only fields the client sent are applied."""

    # Fields that may be cleared by sending null
    nullable_fields: ClassVar[frozenset[str]] = frozenset()

    def changes(self) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        return {k: v for k, v in data.items() if v is not None or k in self.nullable_fields}


# Envelopes
class Envelope(BaseModel, Generic[T]):
    data: T


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)


class Page(BaseModel, Generic[T]):
    data: list[T]
    pagination: Pagination


class MessageResponse(BaseModel):
    message: str


# Images
class ImageRef(BaseModel):
    public_id: str
    url: str

    model_config = ConfigDict(from_attributes=True)


# Artists
class SocialMedia(BaseModel):
    instagram: str = ""
    twitter: str = ""
    youtube: str = ""

    @field_validator("instagram", "twitter", "youtube", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return "" if v is None else v


class ArtistCreate(BaseModel):
    name: RequiredText
    bio: str = ""
    genre: str = ""
    contact_email: OptionalEmail = ""
    contact_phone: Phone = ""
    social_media: SocialMedia = Field(default_factory=SocialMedia)
    status: ArtistStatus = "active"


class ArtistUpdate(UpdateSchema):
    name: RequiredText | None = None
    bio: str | None = None
    genre: str | None = None
    contact_email: OptionalEmail | None = None
    contact_phone: Phone | None = None
    social_media: SocialMedia | None = None
    status: ArtistStatus | None = None


class ArtistSummary(BaseModel):
    """Artist as embedded in an event line-up."""

    id: int
    name: str
    genre: str = ""
    image: ImageRef | None = None

    model_config = ConfigDict(from_attributes=True)


class ArtistResponse(BaseModel):
    id: int
    name: str
    bio: str
    genre: str
    contact_email: str
    contact_phone: str
    social_media: SocialMedia
    status: ArtistStatus
    image: ImageRef | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime

    model_config = ConfigDict(from_attributes=True)


# Events
class EventCreate(BaseModel):
    title: RequiredText
    description: str = ""
    venue: RequiredText
    location: str = ""
    start_date: UtcDatetime
    end_date: UtcDatetime | None = None
    status: EventStatus = "upcoming"
    artists: list[int] = Field(default_factory=list)
    capacity: int = Field(0, ge=0, le=MAX_COUNT)
    ticket_price: float = Field(0, ge=0, le=MAX_PRICE)
    tickets_sold: int = Field(0, ge=0, le=MAX_COUNT)

    @model_validator(mode="after")
    def _end_after_start(self) -> "EventCreate":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class EventUpdate(UpdateSchema):
    nullable_fields: ClassVar[frozenset[str]] = frozenset({"end_date"})

    title: RequiredText | None = None
    description: str | None = None
    venue: RequiredText | None = None
    location: str | None = None
    start_date: UtcDatetime | None = None
    end_date: UtcDatetime | None = None
    status: EventStatus | None = None
    artists: list[int] | None = None
    capacity: int | None = Field(None, ge=0, le=MAX_COUNT)
    ticket_price: float | None = Field(None, ge=0, le=MAX_PRICE)
    tickets_sold: int | None = Field(None, ge=0, le=MAX_COUNT)


class EventResponse(BaseModel):
    id: int
    title: str
    description: str
    venue: str
    location: str
    start_date: UtcDatetime
    end_date: UtcDatetime | None = None
    status: EventStatus
    artists: list[ArtistSummary] = []
    capacity: int
    ticket_price: float
    tickets_sold: int
    image: ImageRef | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime

    model_config = ConfigDict(from_attributes=True)


# Announcements
class AnnouncementCreate(BaseModel):
    title: RequiredText
    content: RequiredText
    author: str = ""
    priority: AnnouncementPriority = "medium"
    is_active: bool = True
    expires_at: UtcDatetime | None = None


class AnnouncementUpdate(UpdateSchema):
    nullable_fields: ClassVar[frozenset[str]] = frozenset({"expires_at"})

    title: RequiredText | None = None
    content: RequiredText | None = None
    author: str | None = None
    priority: AnnouncementPriority | None = None
    is_active: bool | None = None
    expires_at: UtcDatetime | None = None


class AnnouncementResponse(BaseModel):
    id: int
    title: str
    content: str
    author: str
    priority: AnnouncementPriority
    is_active: bool
    expires_at: UtcDatetime | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime

    model_config = ConfigDict(from_attributes=True)


# Dashboard
class CountStats(BaseModel):
    total: int = 0
    active: int = 0


class TicketingStats(BaseModel):
    capacity: int = 0
    sold: int = 0
    revenue: float = 0.0


class EventStats(BaseModel):
    total: int = 0
    upcoming: int = 0
    ticketing: TicketingStats = Field(default_factory=TicketingStats)


class DashboardStats(BaseModel):
    artists: CountStats = Field(default_factory=CountStats)
    events: EventStats = Field(default_factory=EventStats)
    announcements: CountStats = Field(default_factory=CountStats)
