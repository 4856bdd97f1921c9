"""
WellNest Backend — Authorization Policy
========================================

What:  Decides whether a Principal holds a required capability.
Why:   Keeping the policy a pure function means it can be exercised in unit
       tests without HTTP, tokens or a database. Route guards in
       `app.dependencies` only translate a Decision into an exception.
How:   A capability is one of three small value objects. `authorize()`
       matches on its type and returns a Decision.

Rules:
    - No principal, or a principal whose status is not active → unauthenticated
    - RequireRoles      → role must be in the allow-list
    - RequireEmployee   → role must be admin, manager, staff or support
    - RequirePermission → admin always passes; otherwise the permission must be held.
                          Elevated permissions (delete_users, change_user_passwords)
                          use the same rule with a different denial message.

Checks compose by applying them one after another; the first denial wins.
"""

import uuid
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Union

from pydantic import BaseModel, Field

from app.models.enums import (
    ELEVATED_PERMISSIONS,
    EMPLOYEE_ROLES,
    AccountStatus,
    Permission,
    Role,
)


class Principal(BaseModel):
    """The authenticated caller, rebuilt from the account row on every request."""

    id: uuid.UUID
    name: str
    email: str
    role: Role
    department: Optional[str] = None
    permissions: List[Permission] = Field(default_factory=list)
    status: AccountStatus = AccountStatus.ACTIVE

    model_config = {"frozen": True}

    @classmethod
    def from_account(cls, account) -> "Principal":
        """
        Build a Principal from a `User` row.

        Unknown permission strings stored on the row are dropped rather than
        failing the whole request; missing status defaults to active.
        """
        known = {p.value for p in Permission}
        perms = [Permission(p) for p in (account.permissions or []) if p in known]
        return cls(
            id=account.id,
            name=account.name,
            email=account.email,
            role=Role(account.role),
            department=account.department,
            permissions=perms,
            status=AccountStatus(account.status or AccountStatus.ACTIVE.value),
        )

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE

    @property
    def is_employee(self) -> bool:
        return self.role in EMPLOYEE_ROLES


# ── Capabilities ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RequireRoles:
    roles: FrozenSet[Role]

    @classmethod
    def of(cls, *roles: Role) -> "RequireRoles":
        return cls(frozenset(roles))


@dataclass(frozen=True)
class RequireEmployee:
    pass


@dataclass(frozen=True)
class RequirePermission:
    permission: Permission

    @property
    def elevated(self) -> bool:
        return self.permission in ELEVATED_PERMISSIONS


Capability = Union[RequireRoles, RequireEmployee, RequirePermission]


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""
    unauthenticated: bool = False

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(allowed=False, reason=reason)

    @classmethod
    def reject(cls, reason: str) -> "Decision":
        return cls(allowed=False, reason=reason, unauthenticated=True)


NOT_AUTHENTICATED = "Not authorized to access this route"
ACCOUNT_NOT_ACTIVE = "Account is not active. Please contact administrator."


def has_permission(principal: Principal, permission: Permission) -> bool:
    """Admin implicitly holds every permission."""
    return principal.role == Role.ADMIN or permission in principal.permissions


def authorize(principal: Optional[Principal], capability: Capability) -> Decision:
    if principal is None:
        return Decision.reject(NOT_AUTHENTICATED)
    if not principal.is_active:
        return Decision.reject(ACCOUNT_NOT_ACTIVE)

    if isinstance(capability, RequireRoles):
        if principal.role in capability.roles:
            return Decision.allow()
        return Decision.deny(
            f"User role {principal.role.value} is not authorized to access this route"
        )

    if isinstance(capability, RequireEmployee):
        if principal.is_employee:
            return Decision.allow()
        return Decision.deny("Employee access required")

    if isinstance(capability, RequirePermission):
        if has_permission(principal, capability.permission):
            return Decision.allow()
        if capability.elevated:
            return Decision.deny("Insufficient permissions for this operation")
        return Decision.deny("Insufficient permissions")

    raise TypeError(f"Unknown capability: {capability!r}")


def authorize_all(principal: Optional[Principal], *capabilities: Capability) -> Decision:
    """Apply several checks in order; the first denial is returned."""
    for capability in capabilities:
        decision = authorize(principal, capability)
        if not decision.allowed:
            return decision
    return Decision.allow()
