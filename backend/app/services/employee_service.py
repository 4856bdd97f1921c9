"""
WellNest Backend — Employee Service
====================================

What:  Listing, CRUD, statistics and the destructive operations on staff accounts.
Who:   Called by the /api/employees routes after the guard has passed.

Safeguards (checked in this order on delete):
    1. masterCode must equal MASTER_SECURITY_CODE (constant-time compare;
       an unset server secret refuses everything)          → ForbiddenError
    2. the target must exist and hold an employee role       → NotFoundError
    3. the target must not be the last admin                 → InvalidOperationError
    4. the target must not be the caller                     → InvalidOperationError

Password reset uses the same master-code check, generates a random
temporary password and flags the account to change it on next login. The
temporary password is only handed back when EXPOSE_TEMPORARY_PASSWORD is on.
"""

import hmac
import logging
import secrets
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import ConflictError, ForbiddenError, InvalidOperationError, NotFoundError
from app.models.enums import EMPLOYEE_ROLES, AccountStatus, Role
from app.models.user import User
from app.schemas.employee import (
    BulkUpdateRequest,
    EmployeeCreate,
    EmployeeStats,
    EmployeeUpdate,
    breakdown,
)
from app.services.auth_service import hash_password
from app.services.authorization import Principal
from app.services.query_builder import QueryFilterBuilder, SortKey
from app.services.store import (
    FieldMap,
    Page,
    count_where,
    fetch_one,
    fetch_page,
    parse_identifier,
    store_errors,
)

logger = logging.getLogger(__name__)

EMPLOYEE_FIELDS: FieldMap = {
    "name": User.name,
    "email": User.email,
    "department": User.department,
    "role": User.role,
    "status": User.status,
    "createdAt": User.created_at,
}

EMPLOYEE_SEARCH_FIELDS = ("name", "email", "department")

_EMPLOYEE_ROLE_VALUES = sorted(r.value for r in EMPLOYEE_ROLES)

INVALID_MASTER_CODE = "Invalid master security code. Access denied."


def check_master_code(supplied: Optional[str]) -> None:
    """Raise ForbiddenError unless `supplied` matches the configured master code."""
    expected = settings.master_security_code
    if not expected or not supplied:
        raise ForbiddenError(INVALID_MASTER_CODE)
    if not hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8")):
        raise ForbiddenError(INVALID_MASTER_CODE)


def _is_employee_role() -> object:
    return User.role.in_(_EMPLOYEE_ROLE_VALUES)


class EmployeeService:
    """Business logic for staff accounts. Stateless."""

    async def list_employees(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        role: Optional[str] = None,
        status: Optional[str] = None,
        department: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Page:
        builder = QueryFilterBuilder(default_limit=50).search(search, EMPLOYEE_SEARCH_FIELDS)
        # Non-employee roles are ignored rather than rejected
        if role in _EMPLOYEE_ROLE_VALUES:
            builder.equals("role", role)
        qf = (
            builder.equals("status", status)
            .equals("department", department)
            .sort_by(SortKey("createdAt", descending=True))
            .paginate(page, limit)
            .build()
        )
        return await fetch_page(db, User, EMPLOYEE_FIELDS, qf, base=[_is_employee_role()])

    async def get_employee(self, db: AsyncSession, employee_id: str) -> User:
        uid = parse_identifier(employee_id, "employee")
        with store_errors("reading employee"):
            account = await db.get(User, uid)
        if account is None or account.role not in _EMPLOYEE_ROLE_VALUES:
            raise NotFoundError(resource="employee", resource_id=str(employee_id))
        return account

    async def _ensure_email_free(self, db: AsyncSession, email: str) -> None:
        if await fetch_one(db, User, User.email == email) is not None:
            raise ConflictError("Email already exists")

    async def create_employee(
        self, db: AsyncSession, data: EmployeeCreate, actor: Principal
    ) -> User:
        await self._ensure_email_free(db, data.email)

        account = User(
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password),
            role=data.role.value,
            department=data.department,
            phone=data.phone,
            status=data.status.value,
            permissions=[p.value for p in data.permissions],
            is_email_verified=False,
            must_change_password=False,
            created_by=actor.id,
        )
        db.add(account)
        with store_errors("creating employee"):
            await db.flush()
        logger.info("Employee %s created by %s", account.id, actor.id)
        return account

    async def update_employee(
        self, db: AsyncSession, employee_id: str, data: EmployeeUpdate, actor: Principal
    ) -> User:
        account = await self.get_employee(db, employee_id)
        changes = data.model_dump(exclude_unset=True)

        new_email = changes.get("email")
        if new_email and new_email != account.email:
            await self._ensure_email_free(db, new_email)

        for key, value in changes.items():
            if key == "permissions":
                value = [p.value for p in value]
            elif hasattr(value, "value"):
                value = value.value
            setattr(account, key, value)
        account.updated_by = actor.id

        with store_errors("updating employee"):
            await db.flush()
        logger.info("Employee %s updated by %s (fields: %s)", account.id, actor.id, sorted(changes))
        return account

    async def delete_employee(
        self,
        db: AsyncSession,
        employee_id: str,
        master_code: Optional[str],
        actor: Principal,
    ) -> None:
        check_master_code(master_code)
        account = await self.get_employee(db, employee_id)

        if account.role == Role.ADMIN.value:
            admins = await count_where(db, User, User.role == Role.ADMIN.value)
            if admins <= 1:
                raise InvalidOperationError("Cannot delete the last admin user")

        if account.id == actor.id:
            raise InvalidOperationError("Cannot delete your own account")

        with store_errors("deleting employee"):
            await db.delete(account)
            await db.flush()
        logger.warning("Employee %s deleted by %s using master code", account.id, actor.id)

    async def reset_password(
        self,
        db: AsyncSession,
        employee_id: str,
        master_code: Optional[str],
        actor: Principal,
    ) -> Optional[str]:
        """Returns the temporary password only when exposure is enabled."""
        check_master_code(master_code)
        account = await self.get_employee(db, employee_id)

        temporary = secrets.token_urlsafe(12)
        account.password_hash = hash_password(temporary)
        account.must_change_password = True
        account.updated_by = actor.id

        with store_errors("resetting password"):
            await db.flush()
        logger.warning("Password reset for employee %s by %s", account.id, actor.id)

        if settings.expose_temporary_password:
            return temporary
        return None

    async def get_stats(self, db: AsyncSession) -> EmployeeStats:
        employees = _is_employee_role()
        total = await count_where(db, User, employees)
        active = await count_where(db, User, employees, User.status == AccountStatus.ACTIVE.value)
        inactive = await count_where(
            db, User, employees, User.status == AccountStatus.INACTIVE.value
        )
        admins = await count_where(db, User, User.role == Role.ADMIN.value)

        roles = await self._group_counts(db, User.role)
        departments = await self._group_counts(db, User.department)

        return EmployeeStats(
            total=total,
            active=active,
            inactive=inactive,
            admin=admins,
            role_breakdown=breakdown(roles),
            department_breakdown=breakdown(departments),
        )

    async def _group_counts(self, db: AsyncSession, column) -> Dict[Optional[str], int]:
        stmt = (
            select(column, func.count())
            .where(_is_employee_role())
            .group_by(column)
            .order_by(func.count().desc())
        )
        with store_errors("aggregating employees"):
            rows: List[Tuple[Optional[str], int]] = (await db.execute(stmt)).all()
        return {key: count for key, count in rows}

    async def bulk_update(
        self, db: AsyncSession, data: BulkUpdateRequest, actor: Principal
    ) -> int:
        """
        Apply a status change to many staff accounts at once. Ids that are
        malformed or belong to non-employee accounts are skipped.
        """
        if data.status is None:
            return 0

        ids = []
        for raw in data.ids:
            try:
                ids.append(parse_identifier(raw, "employee"))
            except NotFoundError:
                continue
        if not ids:
            return 0

        stmt = (
            update(User)
            .where(User.id.in_(ids), _is_employee_role())
            .values(status=data.status.value, updated_by=actor.id)
            .execution_options(synchronize_session=False)
        )
        with store_errors("bulk updating employees"):
            result = await db.execute(stmt)
        modified = result.rowcount or 0
        logger.info("Bulk status update to %s on %d employees by %s", data.status.value, modified, actor.id)
        return modified


# ── Singleton Instance ────────────────────────────────────────────────────
employee_service = EmployeeService()
