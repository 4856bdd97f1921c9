"""
WellNest Backend — Shared Response Schemas
===========================================

What:  Base model and envelopes shared by every resource.
Why:   The JSON contract uses camelCase keys while Python code uses
       snake_case; `CamelModel` bridges the two once for every schema.
How:   `alias_generator=to_camel` produces the wire names; `populate_by_name`
       lets services and tests construct models with Python names;
       `from_attributes` lets routes validate ORM rows directly.
"""

from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every request/response body in the API."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


T = TypeVar("T")


class PaginationInfo(CamelModel):
    total: int = Field(description="Number of records matching the filter")
    page: int = Field(description="Current page (1-based)")
    pages: int = Field(description="ceil(total / limit)")
    limit: int = Field(description="Page size used for this response")


class ListResponse(CamelModel, Generic[T]):
    """
    What:  Envelope for every paginated listing.

    Example:
        {
            "success": true,
            "count": 10,
            "totalCount": 25,
            "pagination": {"total": 25, "page": 2, "pages": 3, "limit": 10},
            "data": [...]
        }
    """
    success: bool = True
    count: int = Field(description="Number of items in this page")
    total_count: int = Field(description="Number of records matching the filter")
    pagination: PaginationInfo
    data: List[T]


def list_response(page, item_model) -> ListResponse:
    """Wrap a store Page in the listing envelope, validating each row into `item_model`."""
    data = [item_model.model_validate(item) for item in page.items]
    return ListResponse[item_model](
        count=len(data),
        total_count=page.total,
        pagination=PaginationInfo(
            total=page.total,
            page=page.pagination.page,
            pages=page.pages,
            limit=page.pagination.limit,
        ),
        data=data,
    )


class DataResponse(CamelModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: T


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """
    What:  Standardized error envelope for all API errors.

    Example:
        {
            "success": false,
            "error": "not_found",
            "message": "Event not found",
            "details": {"resource": "event"},
            "request_id": "550e8400-e29b-41d4-a716-446655440000"
        }
    """
    success: bool = False
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Health check response.
    Who:   GET /api/health, polled by the hosting platform.
    """
    status: str = Field(description="OK or ERROR")
    database: str = Field(description="connected or disconnected")
    timestamp: datetime = Field(description="Server time (UTC)")
    uptime: float = Field(description="Seconds since process start")
    version: str = Field(description="Application version")
