"""
WellNest Backend — Public Practitioner Directory Routes
========================================================

What:  Unauthenticated directory of active practitioners.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.routes.public_events import set_cache_headers
from app.schemas.common import DataResponse, ErrorResponse, ListResponse, list_response
from app.schemas.practitioner import PractitionerResponse
from app.services.practitioner_service import practitioner_service

router = APIRouter(prefix="/api/public/practitioners", tags=["Public Practitioners"])


@router.get("", response_model=ListResponse[PractitionerResponse])
async def list_public_practitioners(
    response: Response,
    search: Optional[str] = Query(default=None, max_length=200),
    specialty: Optional[List[str]] = Query(default=None),
    location: Optional[List[str]] = Query(default=None),
    insurance: Optional[List[str]] = Query(default=None),
    payment_option: Optional[List[str]] = Query(default=None, alias="paymentOption"),
    session_type: Optional[List[str]] = Query(default=None, alias="sessionType"),
    max_fee: Optional[float] = Query(default=None, ge=0, alias="maxFee"),
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
):
    result = await practitioner_service.list_public_practitioners(
        db,
        search=search,
        specialty=specialty,
        location=location,
        insurance=insurance,
        payment_option=payment_option,
        session_type=session_type,
        max_fee=max_fee,
        page=page,
        limit=limit,
    )
    set_cache_headers(response, settings.public_cache_max_age)
    return list_response(result, PractitionerResponse)


@router.get("/featured/list", response_model=DataResponse[List[PractitionerResponse]])
async def featured_practitioners(response: Response, db: AsyncSession = Depends(get_db_session)):
    practitioners = await practitioner_service.list_featured(db)
    set_cache_headers(response, settings.public_cache_max_age)
    return DataResponse[List[PractitionerResponse]](
        data=[PractitionerResponse.model_validate(p) for p in practitioners]
    )


@router.get(
    "/{practitioner_id}",
    response_model=DataResponse[PractitionerResponse],
    responses={404: {"model": ErrorResponse}},
)
async def get_public_practitioner(
    practitioner_id: str,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
):
    practitioner = await practitioner_service.get_public_practitioner(db, practitioner_id)
    set_cache_headers(response, settings.public_cache_max_age * 2)
    return DataResponse[PractitionerResponse](data=PractitionerResponse.model_validate(practitioner))
