"""
WellNest Backend — Practitioner Route Handlers (staff)
=======================================================

Every route requires an employee account.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import require_employee
from app.schemas.common import DataResponse, ErrorResponse, ListResponse, MessageResponse, list_response
from app.schemas.practitioner import PractitionerCreate, PractitionerResponse, PractitionerUpdate
from app.services.authorization import Principal
from app.services.practitioner_service import practitioner_service

router = APIRouter(prefix="/api/practitioners", tags=["Practitioners"])

_errors = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@router.get("", response_model=ListResponse[PractitionerResponse], responses=_errors)
async def list_practitioners(
    search: Optional[str] = Query(default=None, max_length=200),
    status_: Optional[List[str]] = Query(default=None, alias="status"),
    specialty: Optional[List[str]] = Query(default=None),
    is_featured: Optional[bool] = Query(default=None, alias="isFeatured"),
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    _: Principal = Depends(require_employee),
    db: AsyncSession = Depends(get_db_session),
):
    result = await practitioner_service.list_practitioners(
        db,
        search=search,
        status=status_,
        specialty=specialty,
        is_featured=is_featured,
        page=page,
        limit=limit,
    )
    return list_response(result, PractitionerResponse)


@router.get("/{practitioner_id}", response_model=DataResponse[PractitionerResponse], responses=_errors)
async def get_practitioner(
    practitioner_id: str,
    _: Principal = Depends(require_employee),
    db: AsyncSession = Depends(get_db_session),
):
    practitioner = await practitioner_service.get_practitioner(db, practitioner_id)
    return DataResponse[PractitionerResponse](data=PractitionerResponse.model_validate(practitioner))


@router.post(
    "",
    response_model=DataResponse[PractitionerResponse],
    status_code=status.HTTP_201_CREATED,
    responses={**_errors, 409: {"model": ErrorResponse}},
)
async def create_practitioner(
    body: PractitionerCreate,
    principal: Principal = Depends(require_employee),
    db: AsyncSession = Depends(get_db_session),
):
    practitioner = await practitioner_service.create_practitioner(db, body, principal)
    return DataResponse[PractitionerResponse](
        message="Practitioner created successfully",
        data=PractitionerResponse.model_validate(practitioner),
    )


@router.put(
    "/{practitioner_id}",
    response_model=DataResponse[PractitionerResponse],
    responses={**_errors, 409: {"model": ErrorResponse}},
)
async def update_practitioner(
    practitioner_id: str,
    body: PractitionerUpdate,
    principal: Principal = Depends(require_employee),
    db: AsyncSession = Depends(get_db_session),
):
    practitioner = await practitioner_service.update_practitioner(db, practitioner_id, body, principal)
    return DataResponse[PractitionerResponse](
        message="Practitioner updated successfully",
        data=PractitionerResponse.model_validate(practitioner),
    )


@router.delete("/{practitioner_id}", response_model=MessageResponse, responses=_errors)
async def delete_practitioner(
    practitioner_id: str,
    principal: Principal = Depends(require_employee),
    db: AsyncSession = Depends(get_db_session),
):
    await practitioner_service.delete_practitioner(db, practitioner_id, principal)
    return MessageResponse(message="Practitioner deleted successfully")
