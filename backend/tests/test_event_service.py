"""
WellNest Backend — Event Service Unit Tests
============================================

What:  Tests for event listings, the featured lookup and partial updates.
How:   Mock DB session; generated SQL is inspected where the filter matters.
"""

from datetime import date, datetime, timezone

import pytest
from sqlalchemy.dialects import postgresql

from app.exceptions import NotFoundError, ValidationError
from app.schemas.event import EventCreate, EventUpdate
from app.services.event_service import EventService


def compiled(stmt):
    return stmt.compile(dialect=postgresql.dialect())


class TestPublicListing:

    def setup_method(self):
        self.service = EventService()

    @pytest.mark.asyncio
    async def test_default_filter_is_upcoming_from_today(self, mock_db_session, db_result):
        mock_db_session.execute.side_effect = [db_result(scalar=0), db_result(items=[])]

        page = await self.service.list_public_events(mock_db_session, today=date(2025, 5, 20))

        count_stmt = compiled(mock_db_session.execute.await_args_list[0].args[0])
        text = str(count_stmt)
        assert "events.status IN" in text
        assert "events.date >=" in text
        assert datetime(2025, 5, 20, tzinfo=timezone.utc) in count_stmt.params.values()
        assert page.pagination.limit == 50

    @pytest.mark.asyncio
    async def test_sorted_featured_first_then_date(self, mock_db_session, db_result):
        mock_db_session.execute.side_effect = [db_result(scalar=0), db_result(items=[])]
        await self.service.list_public_events(mock_db_session)
        text = str(compiled(mock_db_session.execute.await_args_list[1].args[0]))
        assert "ORDER BY events.is_featured DESC, events.date ASC" in text

    @pytest.mark.asyncio
    async def test_explicit_window_replaces_today_floor(self, mock_db_session, db_result):
        mock_db_session.execute.side_effect = [db_result(scalar=0), db_result(items=[])]

        await self.service.list_public_events(
            mock_db_session, date_range="next-month", today=date(2025, 5, 20)
        )

        params = compiled(mock_db_session.execute.await_args_list[0].args[0]).params.values()
        assert datetime(2025, 6, 1, tzinfo=timezone.utc) in params
        assert datetime(2025, 7, 1, tzinfo=timezone.utc) in params
        assert datetime(2025, 5, 20, tzinfo=timezone.utc) not in params

    @pytest.mark.asyncio
    async def test_invalid_window(self, mock_db_session):
        with pytest.raises(ValidationError, match="Invalid dateRange"):
            await self.service.list_public_events(mock_db_session, date_range="someday")
        mock_db_session.execute.assert_not_awaited()


class TestAdminListing:

    def setup_method(self):
        self.service = EventService()

    @pytest.mark.asyncio
    async def test_no_implicit_date_or_status_filter(self, mock_db_session, db_result):
        mock_db_session.execute.side_effect = [db_result(scalar=0), db_result(items=[])]

        page = await self.service.list_events(mock_db_session)

        text = str(compiled(mock_db_session.execute.await_args_list[0].args[0]))
        assert "WHERE" not in text
        assert page.pagination.limit == 10

    @pytest.mark.asyncio
    async def test_filters_and_sort(self, mock_db_session, db_result):
        mock_db_session.execute.side_effect = [db_result(scalar=0), db_result(items=[])]

        await self.service.list_events(
            mock_db_session, search="yoga", type=["workshop"], is_featured=False
        )

        text = str(compiled(mock_db_session.execute.await_args_list[1].args[0]))
        assert "events.type =" in text
        assert "events.is_featured =" in text
        assert "events.title" in text and "events.location" in text
        assert "ORDER BY events.date ASC, events.created_at DESC" in text


class TestFeaturedEvent:

    def setup_method(self):
        self.service = EventService()

    @pytest.mark.asyncio
    async def test_featured_preferred(self, mock_db_session, db_result, make_event):
        event = make_event(is_featured=True)
        mock_db_session.execute.return_value = db_result(scalar=event)

        result, featured = await self.service.get_featured_event(mock_db_session)

        assert result is event
        assert featured is True
        assert mock_db_session.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_falls_back_to_next_upcoming(self, mock_db_session, db_result, make_event):
        event = make_event()
        mock_db_session.execute.side_effect = [db_result(scalar=None), db_result(scalar=event)]

        result, featured = await self.service.get_featured_event(mock_db_session)

        assert result is event
        assert featured is False

    @pytest.mark.asyncio
    async def test_nothing_scheduled(self, mock_db_session, db_result):
        mock_db_session.execute.side_effect = [db_result(scalar=None), db_result(scalar=None)]
        with pytest.raises(NotFoundError, match="Featured or upcoming event not found"):
            await self.service.get_featured_event(mock_db_session)


class TestWrites:

    def setup_method(self):
        self.service = EventService()

    @pytest.mark.asyncio
    async def test_status_only_update_keeps_other_fields(self, mock_db_session, make_event, make_principal):
        event = make_event(title="Breathwork Basics", location="Studio B", registered_attendees=12)
        mock_db_session.get.return_value = event
        actor = make_principal()

        await self.service.update_event(
            mock_db_session, str(event.id), EventUpdate(status="completed"), actor
        )

        assert event.status == "completed"
        assert event.title == "Breathwork Basics"
        assert event.location == "Studio B"
        assert event.registered_attendees == 12
        assert event.updated_by == actor.id
        mock_db_session.flush.assert_awaited_once()

    def test_update_rejects_explicit_null(self):
        with pytest.raises(ValueError, match="title cannot be null"):
            EventUpdate(title=None)

    @pytest.mark.asyncio
    async def test_create_sets_organizer_and_creator(self, mock_db_session, make_principal):
        actor = make_principal()
        body = EventCreate(
            title="Sound Bath",
            description="Relax with singing bowls.",
            date="2025-07-04",
            time="7:00 PM",
            location="Rooftop",
            type="community",
        )

        event = await self.service.create_event(mock_db_session, body, actor)

        assert event.organizer_id == actor.id
        assert event.created_by == actor.id
        assert event.status == "upcoming"
        assert event.date == datetime(2025, 7, 4, tzinfo=timezone.utc)
        mock_db_session.add.assert_called_once_with(event)

    def test_create_rejects_unknown_type(self):
        with pytest.raises(ValueError):
            EventCreate(
                title="x", description="y", date="2025-07-04", time="7 PM",
                location="z", type="party",
            )

    @pytest.mark.asyncio
    async def test_malformed_id_is_not_found(self, mock_db_session):
        with pytest.raises(NotFoundError, match="Event not found"):
            await self.service.get_event(mock_db_session, "12345")
        mock_db_session.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete(self, mock_db_session, make_event, make_principal):
        event = make_event()
        mock_db_session.get.return_value = event
        await self.service.delete_event(mock_db_session, str(event.id), make_principal())
        mock_db_session.delete.assert_awaited_once_with(event)
