"""
WellNest Backend — Closed Vocabularies
=======================================

What:  String enums for roles, permissions and record states.
Why:   The authorization policy and the validators check membership against
       these closed sets instead of scattered string literals.
How:   Each enum subclasses `str`, so members compare equal to their stored
       column values and serialize as plain strings in JSON.
"""

from enum import Enum


class Role(str, Enum):
    USER = "user"
    PRACTITIONER = "practitioner"
    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"
    SUPPORT = "support"


# Roles that count as staff of the platform
EMPLOYEE_ROLES = frozenset({Role.ADMIN, Role.MANAGER, Role.STAFF, Role.SUPPORT})


class Permission(str, Enum):
    MANAGE_USERS = "manage_users"
    MANAGE_EVENTS = "manage_events"
    MANAGE_PRACTITIONERS = "manage_practitioners"
    VIEW_ANALYTICS = "view_analytics"
    SYSTEM_SETTINGS = "system_settings"
    CHANGE_USER_PASSWORDS = "change_user_passwords"
    DELETE_USERS = "delete_users"


# Permissions that gate destructive operations; a denial says "for this operation"
ELEVATED_PERMISSIONS = frozenset({Permission.CHANGE_USER_PASSWORDS, Permission.DELETE_USERS})


class AccountStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class EventType(str, Enum):
    WORKSHOP = "workshop"
    SEMINAR = "seminar"
    SUPPORT_GROUP = "support-group"
    TRAINING = "training"
    COMMUNITY = "community"


class EventStatus(str, Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PractitionerStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"
