"""
WellNest Backend — User Account SQLAlchemy Model
=================================================

What:  ORM model for the `users` table.
Why:   Every account (public user, practitioner login, employee) lives in one
       table. Employee-only fields (department, permissions) are simply unused
       for other roles; the employee schemas enforce their presence.
Who:   Credential verification, the employee service, and Alembic.

Table Design Rationale:
    - email is stored lower-cased with a unique index; the unique constraint
      is what turns a concurrent duplicate signup into a Conflict
    - permissions is a PostgreSQL ARRAY so overlap/containment stay in SQL
    - password_hash is never selected into API responses (schemas omit it)
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import ARRAY, UUID, TIMESTAMP

from app.database import Base
from app.models.enums import AccountStatus, Role


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    A login-capable account.

    Lifecycle:
        1. Created by an employee with manage_users (or seeded for the first admin)
        2. last_login is stamped on every successful login
        3. status flips to inactive/suspended to lock the account without deleting it
        4. Deleted only through the master-code protected employee endpoint
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=Role.USER.value,
        server_default=text("'user'"),
    )

    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # ── Employee fields ───────────────────────────────────────────────────
    department: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    permissions: Mapped[List[str]] = mapped_column(
        ARRAY(String(50)),
        nullable=False,
        default=list,
        server_default=text("'{}'"),
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AccountStatus.ACTIVE.value,
        server_default=text("'active'"),
    )

    is_email_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    last_login: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )

    must_change_password: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    profile_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # ── Audit ─────────────────────────────────────────────────────────────
    # Informational only; never consulted for authorization
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_users_role_status", "role", "status"),
        Index("idx_users_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
