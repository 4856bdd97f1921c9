"""
WellNest Backend — Authentication Routes
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.dependencies import get_current_principal
from app.schemas.auth import LoginRequest, PrincipalResponse, TokenResponse
from app.schemas.common import DataResponse, ErrorResponse
from app.services.auth_service import auth_service
from app.services.authorization import Principal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Exchange email and password for a bearer token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    account = await auth_service.authenticate(db, body.email, body.password)
    principal = Principal.from_account(account)
    return TokenResponse(
        token=auth_service.create_access_token(account),
        expires_in=settings.jwt_expire_days * 24 * 3600,
        must_change_password=account.must_change_password,
        user=PrincipalResponse.model_validate(principal.model_dump(mode="json")),
    )


@router.get(
    "/me",
    response_model=DataResponse[PrincipalResponse],
    responses={401: {"model": ErrorResponse}},
    summary="Return the authenticated caller",
)
async def me(principal: Principal = Depends(get_current_principal)) -> DataResponse[PrincipalResponse]:
    return DataResponse[PrincipalResponse](
        data=PrincipalResponse.model_validate(principal.model_dump(mode="json"))
    )
