"""
WellNest Backend — Event Service
=================================

What:  Admin and public listings, featured lookup and CRUD for events.
Who:   /api/events (employee-guarded) and /api/public/events.

Listing defaults:
    Admin  — no date restriction; sort date ASC then created_at DESC; 10 per page.
    Public — only upcoming/ongoing events dated today or later, unless the
             caller supplies fromDate/toDate/dateRange; sort featured first,
             then date ASC; 50 per page.
"""

import logging
from datetime import date, datetime, time, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError
from app.models.enums import EventStatus
from app.models.event import Event
from app.schemas.event import EventCreate, EventUpdate
from app.services.authorization import Principal
from app.services.query_builder import QueryFilterBuilder, SortKey
from app.services.store import FieldMap, Page, fetch_page, parse_identifier, store_errors

logger = logging.getLogger(__name__)

EVENT_FIELDS: FieldMap = {
    "title": Event.title,
    "description": Event.description,
    "location": Event.location,
    "type": Event.type,
    "status": Event.status,
    "isFeatured": Event.is_featured,
    "date": Event.date,
    "createdAt": Event.created_at,
}

EVENT_SEARCH_FIELDS = ("title", "description", "location")

PUBLIC_STATUSES = (EventStatus.UPCOMING.value, EventStatus.ONGOING.value)


def _today_utc() -> date:
    return datetime.now(timezone.utc).date()


class EventService:
    """Business logic for events. Stateless."""

    async def list_events(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        type: Optional[str] = None,
        status: Optional[str] = None,
        is_featured: Optional[bool] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        date_range: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Page:
        qf = (
            QueryFilterBuilder(default_limit=10)
            .search(search, EVENT_SEARCH_FIELDS)
            .any_of("type", type)
            .any_of("status", status)
            .equals("isFeatured", is_featured)
            .date_range("date", from_date, to_date, date_range, today=_today_utc())
            .sort_by(SortKey("date"), SortKey("createdAt", descending=True))
            .paginate(page, limit)
            .build()
        )
        return await fetch_page(db, Event, EVENT_FIELDS, qf)

    async def list_public_events(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        type: Optional[str] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        date_range: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        today: Optional[date] = None,
    ) -> Page:
        today = today or _today_utc()
        builder = (
            QueryFilterBuilder(default_limit=50)
            .search(search, EVENT_SEARCH_FIELDS)
            .any_of("status", PUBLIC_STATUSES)
            .any_of("type", type)
        )
        if from_date or to_date or date_range:
            builder.date_range("date", from_date, to_date, date_range, today=today)
        else:
            builder.at_least("date", datetime.combine(today, time.min, tzinfo=timezone.utc))

        qf = (
            builder.sort_by(SortKey("isFeatured", descending=True), SortKey("date"))
            .paginate(page, limit)
            .build()
        )
        return await fetch_page(db, Event, EVENT_FIELDS, qf)

    async def get_event(self, db: AsyncSession, event_id: str) -> Event:
        uid = parse_identifier(event_id, "event")
        with store_errors("reading event"):
            event = await db.get(Event, uid)
        if event is None:
            raise NotFoundError(resource="event", resource_id=str(event_id))
        return event

    async def get_featured_event(self, db: AsyncSession) -> tuple:
        """
        Returns (event, featured). Prefers the soonest featured upcoming or
        ongoing event; falls back to the soonest upcoming one.
        """
        featured_stmt = (
            select(Event)
            .where(Event.status.in_(PUBLIC_STATUSES), Event.is_featured.is_(True))
            .order_by(Event.date.asc())
            .limit(1)
        )
        with store_errors("reading featured event"):
            event = (await db.execute(featured_stmt)).scalar_one_or_none()
        if event is not None:
            return event, True

        fallback_stmt = (
            select(Event)
            .where(Event.status == EventStatus.UPCOMING.value)
            .order_by(Event.date.asc())
            .limit(1)
        )
        with store_errors("reading next event"):
            event = (await db.execute(fallback_stmt)).scalar_one_or_none()
        if event is None:
            raise NotFoundError(resource="featured or upcoming event")
        return event, False

    async def create_event(self, db: AsyncSession, data: EventCreate, actor: Principal) -> Event:
        event = Event(
            title=data.title,
            description=data.description,
            date=data.date,
            time=data.time,
            location=data.location,
            type=data.type.value,
            status=data.status.value,
            is_featured=data.is_featured,
            registered_attendees=data.registered_attendees,
            image_url=data.image_url,
            registration_url=data.registration_url,
            organizer_id=actor.id,
            created_by=actor.id,
        )
        db.add(event)
        with store_errors("creating event"):
            await db.flush()
        logger.info("Event %s created by %s", event.id, actor.id)
        return event

    async def update_event(
        self, db: AsyncSession, event_id: str, data: EventUpdate, actor: Principal
    ) -> Event:
        event = await self.get_event(db, event_id)
        changes = data.model_dump(exclude_unset=True)
        for key, value in changes.items():
            setattr(event, key, value.value if hasattr(value, "value") else value)
        event.updated_by = actor.id

        with store_errors("updating event"):
            await db.flush()
        logger.info("Event %s updated by %s (fields: %s)", event.id, actor.id, sorted(changes))
        return event

    async def delete_event(self, db: AsyncSession, event_id: str, actor: Principal) -> None:
        event = await self.get_event(db, event_id)
        with store_errors("deleting event"):
            await db.delete(event)
            await db.flush()
        logger.info("Event %s deleted by %s", event.id, actor.id)


# ── Singleton Instance ────────────────────────────────────────────────────
event_service = EventService()
