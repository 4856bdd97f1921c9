"""
WellNest Backend — Event SQLAlchemy Model
==========================================

What:  ORM model for the `events` table.
Who:   EventService (admin and public listings) and Alembic.

Query Patterns:
    - Admin list: ORDER BY date ASC, created_at DESC
    - Public list: WHERE status IN ('upcoming','ongoing') AND date >= today
      ORDER BY is_featured DESC, date ASC
      → idx_events_status_date covers both the filter and the sort key
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID, TIMESTAMP

from app.database import Base
from app.models.enums import EventStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Event(Base):
    """A scheduled workshop, seminar, support group, training or community event."""

    __tablename__ = "events"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(String(2000), nullable=False)

    # date holds the calendar day (UTC midnight); time is the display string, e.g. "6:30 PM"
    date: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    time: Mapped[str] = mapped_column(String(50), nullable=False)

    location: Mapped[str] = mapped_column(String(200), nullable=False)

    type: Mapped[str] = mapped_column(String(30), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=EventStatus.UPCOMING.value,
        server_default=text("'upcoming'"),
    )

    is_featured: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    registered_attendees: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    image_url: Mapped[str] = mapped_column(
        String(500), nullable=False, default="", server_default=text("''")
    )
    registration_url: Mapped[str] = mapped_column(
        String(500), nullable=False, default="", server_default=text("''")
    )

    # ── Ownership (informational) ─────────────────────────────────────────
    organizer_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
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
        CheckConstraint("registered_attendees >= 0", name="ck_events_attendees_nonnegative"),
        Index("idx_events_status_date", "status", "date"),
        Index("idx_events_featured_date", "is_featured", "date"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title='{self.title}', status='{self.status}')>"
