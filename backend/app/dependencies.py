"""
WellNest Backend — Route Guards
================================

What:  FastAPI dependencies that authenticate the caller and enforce a capability.
How:   `get_current_principal` runs the credential verifier on the bearer
       token. The `require_*` factories wrap it, call the pure policy in
       `app.services.authorization`, and raise the matching exception when
       the Decision is a denial. Routes only declare which guard they need.

Usage:
    @router.post("/employees")
    async def create(principal: Principal = Depends(require_permission(Permission.MANAGE_USERS))):
        ...
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import AuthenticationError, ForbiddenError
from app.models.enums import Permission, Role
from app.services.auth_service import auth_service
from app.services.authorization import (
    Capability,
    Principal,
    RequireEmployee,
    RequirePermission,
    RequireRoles,
    authorize_all,
)

# auto_error=False: a missing header reaches the verifier, which owns the 401 message
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Principal:
    token = credentials.credentials if credentials else None
    return await auth_service.verify_token(db, token)


def enforce(principal: Optional[Principal], *capabilities: Capability) -> Principal:
    """Checks apply in order; the first denial decides the status code."""
    decision = authorize_all(principal, *capabilities)
    if decision.allowed:
        return principal
    if decision.unauthenticated:
        raise AuthenticationError(decision.reason)
    raise ForbiddenError(decision.reason)


def require_roles(*roles: Role):
    capability = RequireRoles.of(*roles)

    async def guard(principal: Principal = Depends(get_current_principal)) -> Principal:
        return enforce(principal, capability)

    return guard


def require_permission(permission: Permission):
    """Admins always pass. Elevated permissions use the same check."""
    capability = RequirePermission(permission)

    async def guard(principal: Principal = Depends(get_current_principal)) -> Principal:
        return enforce(principal, capability)

    return guard


async def require_employee(principal: Principal = Depends(get_current_principal)) -> Principal:
    return enforce(principal, RequireEmployee())
