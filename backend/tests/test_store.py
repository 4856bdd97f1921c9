"""
WellNest Backend — Store Adapter Unit Tests
============================================

What:  Tests for QueryFilter → SQL compilation, paging and error translation.
How:   Expressions are compiled against the PostgreSQL dialect and inspected
       as text; paged queries run against the mock session.
"""

from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from app.exceptions import (
    ConflictError,
    DatabaseError,
    GatewayTimeoutError,
    NotFoundError,
    ServiceUnavailableError,
)
from app.models.practitioner import Practitioner
from app.services.event_service import EVENT_FIELDS
from app.services.practitioner_service import PRACTITIONER_FIELDS, PRACTITIONER_SEARCH_FIELDS
from app.services.query_builder import AnyOf, QueryFilterBuilder, Range, SortKey, TextSearch
from app.services.store import (
    compile_clause,
    compile_filter,
    fetch_page,
    parse_identifier,
    store_errors,
)


def sql(expr) -> str:
    return str(expr.compile(dialect=postgresql.dialect()))


class TestCompileClause:

    def test_search_touches_only_listed_fields(self):
        """'yoga' over name/specialty/bio never looks at email or title."""
        clause = TextSearch(fields=PRACTITIONER_SEARCH_FIELDS, term="yoga")
        text = sql(compile_clause(PRACTITIONER_FIELDS, clause))
        assert "practitioners.name" in text
        assert "practitioners.specialty" in text
        assert "practitioners.bio" in text
        assert "practitioners.email" not in text
        assert "practitioners.title" not in text
        assert " OR " in text

    def test_search_is_case_insensitive(self):
        text = sql(compile_clause(PRACTITIONER_FIELDS, TextSearch(fields=("name",), term="Yoga")))
        assert "ILIKE" in text.upper() or "lower(" in text

    def test_array_field_uses_overlap(self):
        text = sql(compile_clause(PRACTITIONER_FIELDS, AnyOf(field="locations", values=("Downtown", "Uptown"))))
        assert "practitioners.locations &&" in text

    def test_scalar_field_single_value_is_equality(self):
        text = sql(compile_clause(EVENT_FIELDS, AnyOf(field="type", values=("workshop",))))
        assert "events.type =" in text

    def test_scalar_field_many_values_is_in(self):
        text = sql(compile_clause(EVENT_FIELDS, AnyOf(field="status", values=("upcoming", "ongoing"))))
        assert "events.status IN" in text

    def test_range_bounds(self):
        inclusive = sql(compile_clause(PRACTITIONER_FIELDS, Range(field="fees.followUp", upper=100)))
        assert "practitioners.fee_follow_up <=" in inclusive

        half_open = sql(
            compile_clause(EVENT_FIELDS, Range(field="date", lower=1, upper=2, upper_exclusive=True))
        )
        assert "events.date >=" in half_open
        assert "events.date <" in half_open
        assert "events.date <=" not in half_open

    def test_unknown_clause_type(self):
        with pytest.raises(TypeError):
            compile_clause(EVENT_FIELDS, object())


class TestCompileFilter:

    def test_order_by_follows_sort_keys(self):
        qf = (
            QueryFilterBuilder()
            .sort_by(SortKey("isFeatured", descending=True), SortKey("name"))
            .build()
        )
        conditions, order_by = compile_filter(PRACTITIONER_FIELDS, qf)
        assert conditions == []
        assert [sql(o) for o in order_by] == [
            "practitioners.is_featured DESC",
            "practitioners.name ASC",
        ]


class TestParseIdentifier:

    def test_valid_uuid(self):
        uid = uuid4()
        assert parse_identifier(str(uid), "event") == uid

    def test_malformed_is_not_found(self):
        with pytest.raises(NotFoundError) as exc_info:
            parse_identifier("not-an-id", "event")
        assert exc_info.value.message == "Event not found"
        assert exc_info.value.status_code == 404


class TestStoreErrors:

    def test_integrity_error_becomes_conflict(self):
        with pytest.raises(ConflictError):
            with store_errors("creating practitioner"):
                raise IntegrityError("INSERT ...", {}, Exception("duplicate key"))

    def test_operational_error_becomes_unavailable(self):
        with pytest.raises(ServiceUnavailableError) as exc_info:
            with store_errors("listing events"):
                raise OperationalError("SELECT 1", {}, Exception("connection refused"))
        assert exc_info.value.status_code == 503

    def test_pool_exhaustion_becomes_timeout(self):
        with pytest.raises(GatewayTimeoutError) as exc_info:
            with store_errors("listing events"):
                raise PoolTimeoutError("QueuePool limit of size 5 overflow 5 reached")
        assert exc_info.value.status_code == 504
        assert exc_info.value.error_code == "timeout"

    def test_other_errors_become_database_error(self):
        with pytest.raises(DatabaseError) as exc_info:
            with store_errors("listing events"):
                raise SQLAlchemyError("boom")
        assert exc_info.value.context["action"] == "listing events"

    def test_non_database_errors_pass_through(self):
        with pytest.raises(KeyError):
            with store_errors("listing events"):
                raise KeyError("x")


class TestFetchPage:

    @pytest.mark.asyncio
    async def test_page_two_of_three(self, mock_db_session, db_result, make_practitioner):
        items = [make_practitioner() for _ in range(10)]
        mock_db_session.execute.side_effect = [db_result(scalar=25), db_result(items=items)]
        qf = QueryFilterBuilder().paginate(2, 10).build()

        page = await fetch_page(mock_db_session, Practitioner, PRACTITIONER_FIELDS, qf)

        assert page.total == 25
        assert page.pages == 3
        assert page.items == items
        assert mock_db_session.execute.await_count == 2

        stmt = mock_db_session.execute.await_args_list[1].args[0]
        compiled = stmt.compile(dialect=postgresql.dialect())
        assert "LIMIT" in str(compiled) and "OFFSET" in str(compiled)
        assert sorted(compiled.params.values()) == [10, 10]

    @pytest.mark.asyncio
    async def test_store_failure_is_mapped(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))
        with pytest.raises(ServiceUnavailableError):
            await fetch_page(
                mock_db_session, Practitioner, PRACTITIONER_FIELDS, QueryFilterBuilder().build()
            )
