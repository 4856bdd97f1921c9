"""
WellNest Backend — Employee Route Handlers
==========================================

Guards:
    GET    /api/employees                      any employee
    GET    /api/employees/stats                any employee
    GET    /api/employees/{id}                 any employee
    POST   /api/employees                      manage_users
    PUT    /api/employees/bulk                 manage_users
    PUT    /api/employees/{id}                 manage_users
    DELETE /api/employees/{id}                 delete_users + masterCode
    POST   /api/employees/{id}/reset-password  change_user_passwords + masterCode

Static paths (/stats, /bulk) are declared before /{id} so they are not
captured as identifiers.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import require_employee, require_permission
from app.models.enums import Permission
from app.schemas.common import DataResponse, ErrorResponse, ListResponse, MessageResponse, list_response
from app.schemas.employee import (
    BulkUpdateRequest,
    BulkUpdateResponse,
    EmployeeCreate,
    EmployeeResponse,
    EmployeeStats,
    EmployeeUpdate,
    MasterCodeRequest,
    PasswordResetResponse,
)
from app.services.authorization import Principal
from app.services.employee_service import employee_service

router = APIRouter(prefix="/api/employees", tags=["Employees"])

_errors = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@router.get("", response_model=ListResponse[EmployeeResponse], responses=_errors)
async def list_employees(
    search: Optional[str] = Query(default=None, max_length=200),
    role: Optional[str] = Query(default=None),
    status_: Optional[str] = Query(default=None, alias="status"),
    department: Optional[str] = Query(default=None),
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    _: Principal = Depends(require_employee),
    db: AsyncSession = Depends(get_db_session),
):
    page_ = await employee_service.list_employees(
        db,
        search=search,
        role=role,
        status=status_,
        department=department,
        page=page,
        limit=limit,
    )
    return list_response(page_, EmployeeResponse)


@router.get("/stats", response_model=DataResponse[EmployeeStats], responses=_errors)
async def employee_stats(
    _: Principal = Depends(require_employee),
    db: AsyncSession = Depends(get_db_session),
):
    return DataResponse[EmployeeStats](data=await employee_service.get_stats(db))


@router.put("/bulk", response_model=BulkUpdateResponse, responses=_errors)
async def bulk_update_employees(
    body: BulkUpdateRequest,
    principal: Principal = Depends(require_permission(Permission.MANAGE_USERS)),
    db: AsyncSession = Depends(get_db_session),
):
    modified = await employee_service.bulk_update(db, body, principal)
    return BulkUpdateResponse(
        message=f"{modified} employees updated successfully",
        modified_count=modified,
    )


@router.get("/{employee_id}", response_model=DataResponse[EmployeeResponse], responses=_errors)
async def get_employee(
    employee_id: str,
    _: Principal = Depends(require_employee),
    db: AsyncSession = Depends(get_db_session),
):
    account = await employee_service.get_employee(db, employee_id)
    return DataResponse[EmployeeResponse](data=EmployeeResponse.model_validate(account))


@router.post(
    "",
    response_model=DataResponse[EmployeeResponse],
    status_code=status.HTTP_201_CREATED,
    responses={**_errors, 409: {"model": ErrorResponse}},
)
async def create_employee(
    body: EmployeeCreate,
    principal: Principal = Depends(require_permission(Permission.MANAGE_USERS)),
    db: AsyncSession = Depends(get_db_session),
):
    account = await employee_service.create_employee(db, body, principal)
    return DataResponse[EmployeeResponse](
        message="Employee created successfully",
        data=EmployeeResponse.model_validate(account),
    )


@router.put(
    "/{employee_id}",
    response_model=DataResponse[EmployeeResponse],
    responses={**_errors, 409: {"model": ErrorResponse}},
)
async def update_employee(
    employee_id: str,
    body: EmployeeUpdate,
    principal: Principal = Depends(require_permission(Permission.MANAGE_USERS)),
    db: AsyncSession = Depends(get_db_session),
):
    account = await employee_service.update_employee(db, employee_id, body, principal)
    return DataResponse[EmployeeResponse](
        message="Employee updated successfully",
        data=EmployeeResponse.model_validate(account),
    )


@router.delete("/{employee_id}", response_model=MessageResponse, responses=_errors)
async def delete_employee(
    employee_id: str,
    body: Optional[MasterCodeRequest] = None,
    principal: Principal = Depends(require_permission(Permission.DELETE_USERS)),
    db: AsyncSession = Depends(get_db_session),
):
    await employee_service.delete_employee(
        db, employee_id, body.master_code if body else None, principal
    )
    return MessageResponse(message="Employee deleted successfully")


@router.post(
    "/{employee_id}/reset-password",
    response_model=PasswordResetResponse,
    response_model_exclude_none=True,
    responses=_errors,
)
async def reset_employee_password(
    employee_id: str,
    body: Optional[MasterCodeRequest] = None,
    principal: Principal = Depends(require_permission(Permission.CHANGE_USER_PASSWORDS)),
    db: AsyncSession = Depends(get_db_session),
):
    temporary = await employee_service.reset_password(
        db, employee_id, body.master_code if body else None, principal
    )
    return PasswordResetResponse(
        message="Password reset successfully. The employee must change it at next login.",
        temporary_password=temporary,
    )
