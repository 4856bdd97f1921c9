"""
WellNest Backend — Employee Schemas
====================================

What:  Request and response bodies for /api/employees.
Why:   Employees are ordinary `users` rows with an employee role. The rules
       that only apply to staff accounts (role must be an employee role,
       department is required) live here, once.
"""

import uuid
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import EmailStr, Field, ValidationInfo, field_validator

from app.models.enums import EMPLOYEE_ROLES, AccountStatus, Permission, Role
from app.schemas.common import CamelModel
from app.schemas.validators import RawSecret, reject_null


def _employee_role(v: Role) -> Role:
    if v not in EMPLOYEE_ROLES:
        raise ValueError("Invalid role. Must be admin, manager, staff, or support")
    return v


def _dedupe(perms: List[Permission]) -> List[Permission]:
    seen: List[Permission] = []
    for perm in perms:
        if perm not in seen:
            seen.append(perm)
    return seen


class EmployeeCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: RawSecret = Field(min_length=6, max_length=128)
    role: Role
    department: str = Field(min_length=1, max_length=50)
    phone: Optional[str] = Field(default=None, max_length=20)
    status: AccountStatus = AccountStatus.ACTIVE
    permissions: List[Permission] = Field(default_factory=list)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: Role) -> Role:
        return _employee_role(v)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("permissions")
    @classmethod
    def dedupe_permissions(cls, v: List[Permission]) -> List[Permission]:
        return _dedupe(v)


class EmployeeUpdate(CamelModel):
    """Partial update. Passwords change only through reset-password."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    department: Optional[str] = Field(default=None, min_length=1, max_length=50)
    phone: Optional[str] = Field(default=None, max_length=20)
    status: Optional[AccountStatus] = None
    permissions: Optional[List[Permission]] = None

    @field_validator("name", "email", "role", "department", "status", "permissions")
    @classmethod
    def no_explicit_nulls(cls, v, info: ValidationInfo):
        return reject_null(v, info.field_name)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: Role) -> Role:
        return _employee_role(v)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("permissions")
    @classmethod
    def dedupe_permissions(cls, v: List[Permission]) -> List[Permission]:
        return _dedupe(v)


class EmployeeResponse(CamelModel):
    """Never includes the password hash."""

    id: uuid.UUID
    name: str
    email: str
    role: str
    phone: Optional[str] = None
    department: Optional[str] = None
    status: str
    permissions: List[str]
    is_email_verified: bool
    last_login: Optional[datetime] = None
    must_change_password: bool
    profile_image: Optional[str] = None
    created_by: Optional[uuid.UUID] = None
    updated_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime


class MasterCodeRequest(CamelModel):
    """Body of the destructive employee operations."""

    master_code: RawSecret = Field(default="", max_length=256)


class BulkUpdateRequest(CamelModel):
    ids: List[str] = Field(min_length=1)
    status: Optional[AccountStatus] = None


class BulkUpdateResponse(CamelModel):
    success: bool = True
    message: str
    modified_count: int


class PasswordResetResponse(CamelModel):
    success: bool = True
    message: str
    must_change_password: bool = True
    temporary_password: Optional[str] = Field(
        default=None,
        description="Only present when EXPOSE_TEMPORARY_PASSWORD is enabled",
    )


class BreakdownEntry(CamelModel):
    key: Optional[str] = None
    count: int


class EmployeeStats(CamelModel):
    total: int
    active: int
    inactive: int
    admin: int
    role_breakdown: List[BreakdownEntry]
    department_breakdown: List[BreakdownEntry]


def breakdown(rows: Dict[Optional[str], int]) -> List[BreakdownEntry]:
    return [BreakdownEntry(key=key, count=count) for key, count in rows.items()]
