"""
WellNest Backend — Event Route Handlers (staff)
================================================

Every route requires an employee account. Listing accepts search, type,
status, isFeatured, fromDate/toDate or dateRange, page and limit.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import require_employee
from app.schemas.common import DataResponse, ErrorResponse, ListResponse, MessageResponse, list_response
from app.schemas.event import EventCreate, EventResponse, EventUpdate
from app.services.authorization import Principal
from app.services.event_service import event_service

router = APIRouter(prefix="/api/events", tags=["Events"])

_errors = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@router.get("", response_model=ListResponse[EventResponse], responses=_errors)
async def list_events(
    search: Optional[str] = Query(default=None, max_length=200),
    type_: Optional[List[str]] = Query(default=None, alias="type"),
    status_: Optional[List[str]] = Query(default=None, alias="status"),
    is_featured: Optional[bool] = Query(default=None, alias="isFeatured"),
    from_date: Optional[str] = Query(default=None, alias="fromDate"),
    to_date: Optional[str] = Query(default=None, alias="toDate"),
    date_range: Optional[str] = Query(default=None, alias="dateRange"),
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    _: Principal = Depends(require_employee),
    db: AsyncSession = Depends(get_db_session),
):
    result = await event_service.list_events(
        db,
        search=search,
        type=type_,
        status=status_,
        is_featured=is_featured,
        from_date=from_date,
        to_date=to_date,
        date_range=date_range,
        page=page,
        limit=limit,
    )
    return list_response(result, EventResponse)


@router.get("/{event_id}", response_model=DataResponse[EventResponse], responses=_errors)
async def get_event(
    event_id: str,
    _: Principal = Depends(require_employee),
    db: AsyncSession = Depends(get_db_session),
):
    event = await event_service.get_event(db, event_id)
    return DataResponse[EventResponse](data=EventResponse.model_validate(event))


@router.post(
    "",
    response_model=DataResponse[EventResponse],
    status_code=status.HTTP_201_CREATED,
    responses=_errors,
)
async def create_event(
    body: EventCreate,
    principal: Principal = Depends(require_employee),
    db: AsyncSession = Depends(get_db_session),
):
    event = await event_service.create_event(db, body, principal)
    return DataResponse[EventResponse](
        message="Event created successfully",
        data=EventResponse.model_validate(event),
    )


@router.put("/{event_id}", response_model=DataResponse[EventResponse], responses=_errors)
async def update_event(
    event_id: str,
    body: EventUpdate,
    principal: Principal = Depends(require_employee),
    db: AsyncSession = Depends(get_db_session),
):
    event = await event_service.update_event(db, event_id, body, principal)
    return DataResponse[EventResponse](
        message="Event updated successfully",
        data=EventResponse.model_validate(event),
    )


@router.delete("/{event_id}", response_model=MessageResponse, responses=_errors)
async def delete_event(
    event_id: str,
    principal: Principal = Depends(require_employee),
    db: AsyncSession = Depends(get_db_session),
):
    await event_service.delete_event(db, event_id, principal)
    return MessageResponse(message="Event deleted successfully")
