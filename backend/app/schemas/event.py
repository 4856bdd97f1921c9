"""
WellNest Backend — Event Schemas
=================================

What:  Request and response bodies for /api/events and /api/public/events.
How:   EventCreate enforces every required field; EventUpdate makes every
       field optional and the service applies only the keys the client sent
       (`model_dump(exclude_unset=True)`).
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field, ValidationInfo, field_validator

from app.models.enums import EventStatus, EventType
from app.schemas.common import CamelModel
from app.schemas.validators import as_utc, optional_url, reject_null


class EventCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=2000)
    date: datetime
    time: str = Field(min_length=1, max_length=50)
    location: str = Field(min_length=1, max_length=200)
    type: EventType
    status: EventStatus = EventStatus.UPCOMING
    is_featured: bool = False
    registered_attendees: int = Field(default=0, ge=0)
    image_url: str = Field(default="", max_length=500)
    registration_url: str = Field(default="", max_length=500)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return as_utc(v)

    @field_validator("registration_url")
    @classmethod
    def validate_registration_url(cls, v: str) -> str:
        return optional_url(v)


class EventUpdate(CamelModel):
    """Partial update. Omitted fields are left untouched."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    date: Optional[datetime] = None
    time: Optional[str] = Field(default=None, min_length=1, max_length=50)
    location: Optional[str] = Field(default=None, min_length=1, max_length=200)
    type: Optional[EventType] = None
    status: Optional[EventStatus] = None
    is_featured: Optional[bool] = None
    registered_attendees: Optional[int] = Field(default=None, ge=0)
    image_url: Optional[str] = Field(default=None, max_length=500)
    registration_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator(
        "title", "description", "date", "time", "location", "type", "status",
        "is_featured", "registered_attendees",
    )
    @classmethod
    def no_explicit_nulls(cls, v, info: ValidationInfo):
        return reject_null(v, info.field_name)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return as_utc(v)

    @field_validator("registration_url")
    @classmethod
    def validate_registration_url(cls, v: Optional[str]) -> str:
        return optional_url(v)

    @field_validator("image_url")
    @classmethod
    def blank_image_url(cls, v: Optional[str]) -> str:
        return v or ""


class EventResponse(CamelModel):
    id: uuid.UUID
    title: str
    description: str
    date: datetime
    time: str
    location: str
    type: str
    status: str
    is_featured: bool
    registered_attendees: int
    image_url: str
    registration_url: str
    organizer_id: Optional[uuid.UUID] = None
    created_by: Optional[uuid.UUID] = None
    updated_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime


class PublicEventResponse(CamelModel):
    """Public projection: no audit fields."""

    id: uuid.UUID
    title: str
    description: str
    date: datetime
    time: str
    location: str
    type: str
    status: str
    is_featured: bool
    image_url: str
    registration_url: str


class FeaturedEventResponse(CamelModel):
    success: bool = True
    featured: bool
    data: PublicEventResponse
