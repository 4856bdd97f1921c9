"""
WellNest Backend — Practitioner Schemas
========================================

What:  Request and response bodies for /api/practitioners and the public directory.
How:   Fees travel as a nested `{initial, followUp}` object; the service
       flattens them onto the fee_initial / fee_follow_up columns.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, ValidationInfo, field_validator

from app.models.enums import PractitionerStatus
from app.schemas.common import CamelModel
from app.schemas.validators import clean_list, non_empty_list, optional_http_url, reject_null


class Fees(CamelModel):
    initial: float = Field(ge=0)
    follow_up: float = Field(ge=0)


class FeesUpdate(CamelModel):
    initial: Optional[float] = Field(default=None, ge=0)
    follow_up: Optional[float] = Field(default=None, ge=0)


class PractitionerCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    title: str = Field(min_length=1, max_length=200)
    specialty: str = Field(min_length=1, max_length=200)
    experience: str = Field(min_length=1, max_length=100)
    bio: str = Field(min_length=1, max_length=1000)
    locations: List[str]
    email: EmailStr
    phone: str = Field(min_length=1, max_length=30)
    address: Optional[str] = Field(default=None, max_length=300)
    website: Optional[str] = Field(default=None, max_length=500)
    fees: Fees
    insurances: List[str] = Field(default_factory=list)
    payment_options: List[str] = Field(default_factory=list)
    session_types: List[str]
    availability: Optional[str] = Field(default=None, max_length=500)
    education: Optional[str] = Field(default=None, max_length=500)
    image_url: Optional[str] = Field(default=None, max_length=500)
    status: PractitionerStatus = PractitionerStatus.ACTIVE
    is_featured: bool = False
    user_id: Optional[uuid.UUID] = None

    @field_validator("locations")
    @classmethod
    def require_location(cls, v: List[str]) -> List[str]:
        return non_empty_list(v, "location")

    @field_validator("session_types")
    @classmethod
    def require_session_type(cls, v: List[str]) -> List[str]:
        return non_empty_list(v, "session type")

    @field_validator("insurances", "payment_options")
    @classmethod
    def strip_items(cls, v: List[str]) -> List[str]:
        return clean_list(v)

    @field_validator("website")
    @classmethod
    def validate_website(cls, v: Optional[str]) -> Optional[str]:
        return optional_http_url(v)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class PractitionerUpdate(CamelModel):
    """Partial update. Omitted fields are left untouched; `fees` may be partial too."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    specialty: Optional[str] = Field(default=None, min_length=1, max_length=200)
    experience: Optional[str] = Field(default=None, min_length=1, max_length=100)
    bio: Optional[str] = Field(default=None, min_length=1, max_length=1000)
    locations: Optional[List[str]] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, min_length=1, max_length=30)
    address: Optional[str] = Field(default=None, max_length=300)
    website: Optional[str] = Field(default=None, max_length=500)
    fees: Optional[FeesUpdate] = None
    insurances: Optional[List[str]] = None
    payment_options: Optional[List[str]] = None
    session_types: Optional[List[str]] = None
    availability: Optional[str] = Field(default=None, max_length=500)
    education: Optional[str] = Field(default=None, max_length=500)
    image_url: Optional[str] = Field(default=None, max_length=500)
    status: Optional[PractitionerStatus] = None
    is_featured: Optional[bool] = None
    user_id: Optional[uuid.UUID] = None

    @field_validator(
        "name", "title", "specialty", "experience", "bio", "locations", "email",
        "phone", "fees", "session_types", "status", "is_featured",
    )
    @classmethod
    def no_explicit_nulls(cls, v, info: ValidationInfo):
        return reject_null(v, info.field_name)

    @field_validator("locations")
    @classmethod
    def require_location(cls, v: List[str]) -> List[str]:
        return non_empty_list(v, "location")

    @field_validator("session_types")
    @classmethod
    def require_session_type(cls, v: List[str]) -> List[str]:
        return non_empty_list(v, "session type")

    @field_validator("insurances", "payment_options")
    @classmethod
    def strip_items(cls, v: Optional[List[str]]) -> List[str]:
        return clean_list(v)

    @field_validator("website")
    @classmethod
    def validate_website(cls, v: Optional[str]) -> Optional[str]:
        return optional_http_url(v)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class PractitionerResponse(CamelModel):
    id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    name: str
    title: str
    specialty: str
    experience: str
    bio: str
    locations: List[str]
    email: str
    phone: str
    address: Optional[str] = None
    website: Optional[str] = None
    fees: Fees
    insurances: List[str]
    payment_options: List[str]
    session_types: List[str]
    availability: Optional[str] = None
    education: Optional[str] = None
    image_url: Optional[str] = None
    status: str
    is_featured: bool
    slug: str
    created_by: Optional[uuid.UUID] = None
    updated_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime
