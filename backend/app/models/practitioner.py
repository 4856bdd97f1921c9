"""
WellNest Backend — Practitioner SQLAlchemy Model
=================================================

What:  ORM model for the `practitioners` table (the public directory).
Who:   PractitionerService and Alembic.

Table Design Rationale:
    - fees are two flat columns (fee_initial, fee_follow_up); the API shape
      `fees: {initial, followUp}` is rebuilt by the `fees` property
    - locations, insurances, payment_options and session_types are ARRAY
      columns so a multi-value filter compiles to the `&&` (overlap) operator
    - slug is recomputed from the name on every save
"""

import re
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Numeric,
    String,
    event,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import ARRAY, UUID, TIMESTAMP

from app.database import Base
from app.models.enums import PractitionerStatus


_NON_WORD = re.compile(r"[^\w ]+")
_SPACES = re.compile(r" +")


def slugify(name: str) -> str:
    """'Dr. Jane Doe' → 'dr-jane-doe'"""
    return _SPACES.sub("-", _NON_WORD.sub("", name.lower()))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Practitioner(Base):
    """A wellness practitioner listed in the public directory."""

    __tablename__ = "practitioners"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    # Optional link to a login account with role "practitioner"
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    specialty: Mapped[str] = mapped_column(String(200), nullable=False)
    experience: Mapped[str] = mapped_column(String(100), nullable=False)
    bio: Mapped[str] = mapped_column(String(1000), nullable=False)

    locations: Mapped[List[str]] = mapped_column(ARRAY(String(200)), nullable=False)

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # ── Fees ──────────────────────────────────────────────────────────────
    fee_initial: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    fee_follow_up: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)

    insurances: Mapped[List[str]] = mapped_column(
        ARRAY(String(100)), nullable=False, default=list, server_default=text("'{}'")
    )
    payment_options: Mapped[List[str]] = mapped_column(
        ARRAY(String(100)), nullable=False, default=list, server_default=text("'{}'")
    )
    session_types: Mapped[List[str]] = mapped_column(ARRAY(String(100)), nullable=False)

    availability: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    education: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PractitionerStatus.ACTIVE.value,
        server_default=text("'active'"),
    )
    is_featured: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    slug: Mapped[str] = mapped_column(String(120), nullable=False, default="")

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
        CheckConstraint("fee_initial >= 0", name="ck_practitioners_fee_initial_nonnegative"),
        CheckConstraint("fee_follow_up >= 0", name="ck_practitioners_fee_follow_up_nonnegative"),
        Index("idx_practitioners_status_featured", "status", "is_featured"),
    )

    @property
    def fees(self) -> Dict[str, float]:
        return {"initial": self.fee_initial, "followUp": self.fee_follow_up}

    def __repr__(self) -> str:
        return f"<Practitioner(id={self.id}, name='{self.name}', status='{self.status}')>"


@event.listens_for(Practitioner, "before_insert")
@event.listens_for(Practitioner, "before_update")
def _refresh_slug(mapper, connection, target: Practitioner) -> None:
    target.slug = slugify(target.name or "")
