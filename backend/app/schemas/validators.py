"""
Reusable field checks shared by the resource schemas.

Each function takes the raw value and returns the normalized value or raises
ValueError; pydantic turns the ValueError into a field error.
"""

from datetime import datetime, timezone
from typing import Annotated, Iterable, Optional

from pydantic import AnyHttpUrl, AnyUrl, StringConstraints, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

_any_url = TypeAdapter(AnyUrl)
_http_url = TypeAdapter(AnyHttpUrl)

# Passwords and the master code are compared byte for byte, so the
# model-wide whitespace stripping is switched off for them.
RawSecret = Annotated[str, StringConstraints(strip_whitespace=False)]


def optional_url(value: Optional[str]) -> str:
    """Empty string (or None) passes through as ""; anything else must parse as a URL."""
    if not value:
        return ""
    try:
        _any_url.validate_python(value)
    except PydanticValidationError:
        raise ValueError("Please provide a valid URL")
    return value


def optional_http_url(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    try:
        _http_url.validate_python(value)
    except PydanticValidationError:
        raise ValueError("Please use a valid URL with HTTP or HTTPS")
    return value


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def non_empty_list(value: Optional[list], label: str) -> list:
    cleaned = [item.strip() for item in (value or []) if item and item.strip()]
    if not cleaned:
        raise ValueError(f"Please add at least one {label}")
    return cleaned


def clean_list(value: Optional[Iterable[str]]) -> list:
    return [item.strip() for item in (value or []) if item and item.strip()]


def reject_null(value, field_name: str):
    """Used by update schemas: a field may be omitted but not explicitly nulled."""
    if value is None:
        raise ValueError(f"{field_name} cannot be null")
    return value
