"""
WellNest Backend — Public Event Routes
=======================================

What:  Unauthenticated event listing for the public site.
Caching Strategy:
    - listing and the non-featured fallback: public, max-age=PUBLIC_CACHE_MAX_AGE
    - single event and the featured event:   twice that (items change less often)
    All responses carry `Vary: Accept-Encoding` because GZip is applied upstream.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.schemas.common import DataResponse, ErrorResponse, ListResponse, list_response
from app.schemas.event import FeaturedEventResponse, PublicEventResponse
from app.services.event_service import event_service

router = APIRouter(prefix="/api/public/events", tags=["Public Events"])


def set_cache_headers(response: Response, max_age: int) -> None:
    response.headers["Cache-Control"] = f"public, max-age={max_age}"
    response.headers["Vary"] = "Accept-Encoding"


@router.get(
    "",
    response_model=ListResponse[PublicEventResponse],
    responses={400: {"model": ErrorResponse}},
    summary="Upcoming and ongoing events",
)
async def list_public_events(
    response: Response,
    search: Optional[str] = Query(default=None, max_length=200),
    type_: Optional[List[str]] = Query(default=None, alias="type"),
    from_date: Optional[str] = Query(default=None, alias="fromDate"),
    to_date: Optional[str] = Query(default=None, alias="toDate"),
    date_range: Optional[str] = Query(default=None, alias="dateRange"),
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
):
    result = await event_service.list_public_events(
        db,
        search=search,
        type=type_,
        from_date=from_date,
        to_date=to_date,
        date_range=date_range,
        page=page,
        limit=limit,
    )
    set_cache_headers(response, settings.public_cache_max_age)
    return list_response(result, PublicEventResponse)


@router.get(
    "/featured/current",
    response_model=FeaturedEventResponse,
    responses={404: {"model": ErrorResponse}},
    summary="The featured event, or the next upcoming one",
)
async def featured_event(response: Response, db: AsyncSession = Depends(get_db_session)):
    event, featured = await event_service.get_featured_event(db)
    max_age = settings.public_cache_max_age * (2 if featured else 1)
    set_cache_headers(response, max_age)
    return FeaturedEventResponse(featured=featured, data=PublicEventResponse.model_validate(event))


@router.get(
    "/{event_id}",
    response_model=DataResponse[PublicEventResponse],
    responses={404: {"model": ErrorResponse}},
)
async def get_public_event(
    event_id: str,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
):
    event = await event_service.get_event(db, event_id)
    set_cache_headers(response, settings.public_cache_max_age * 2)
    return DataResponse[PublicEventResponse](data=PublicEventResponse.model_validate(event))
