"""
WellNest Backend — Query Filter Builder
========================================

What:  Turns optional listing inputs (search text, categorical filters, date
       ranges, numeric thresholds, page/limit) into a QueryFilter descriptor.
Why:   Every listing endpoint needs the same "ignore what's absent, combine
       what's present" logic. Keeping it free of SQL and I/O means it can be
       tested with plain values; `app.services.store` compiles the result.
How:   A fluent builder appends clauses; `build()` freezes them together
       with a fixed sort and a pagination window.

Field names in clauses are the API's dotted paths (e.g. "fees.followUp");
the store maps them onto columns.

Example:
    qf = (
        QueryFilterBuilder(default_limit=12)
        .search(params.search, ["name", "specialty", "bio"])
        .any_of("specialty", params.specialty)
        .at_most("fees.followUp", params.max_fee)
        .sort_by(SortKey("isFeatured", descending=True), SortKey("name"))
        .paginate(params.page, params.limit)
        .build()
    )
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Iterable, Optional, Sequence, Tuple, Union

from app.exceptions import ValidationError


MAX_PAGE_SIZE = 100

# Relative windows accepted by `dateRange`
DATE_WINDOWS = ("next-7-days", "this-month", "next-month")


# ── Clauses ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TextSearch:
    """Case-insensitive substring match on ANY of the fields."""
    fields: Tuple[str, ...]
    term: str


@dataclass(frozen=True)
class AnyOf:
    """Field equals one of the values (array fields: overlaps the values)."""
    field: str
    values: Tuple[Any, ...]


@dataclass(frozen=True)
class Range:
    """lower <= field, and field <= upper (or < upper when upper_exclusive)."""
    field: str
    lower: Any = None
    upper: Any = None
    upper_exclusive: bool = False


Clause = Union[TextSearch, AnyOf, Range]


@dataclass(frozen=True)
class SortKey:
    field: str
    descending: bool = False


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def pages_for(self, total: int) -> int:
        return math.ceil(total / self.limit) if self.limit else 0


@dataclass(frozen=True)
class QueryFilter:
    clauses: Tuple[Clause, ...] = ()
    sort: Tuple[SortKey, ...] = ()
    pagination: Pagination = field(default_factory=lambda: Pagination(page=1, limit=10))

    def has_clause_on(self, field_name: str) -> bool:
        return any(
            getattr(c, "field", None) == field_name for c in self.clauses
        )


# ── Date helpers ──────────────────────────────────────────────────────────

def _start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def _first_of_next_month(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def resolve_date_window(name: str, today: date) -> Tuple[datetime, datetime]:
    """
    Map a named window to a half-open [start, end) interval in UTC.

        next-7-days → today 00:00 up to the start of today + 8 days
        this-month  → first of this month up to first of next month
        next-month  → first of next month up to first of the month after
    """
    if name == "next-7-days":
        return _start_of_day(today), _start_of_day(today + timedelta(days=8))
    if name == "this-month":
        first = today.replace(day=1)
        return _start_of_day(first), _start_of_day(_first_of_next_month(first))
    if name == "next-month":
        first = _first_of_next_month(today)
        return _start_of_day(first), _start_of_day(_first_of_next_month(first))
    raise ValidationError(
        f"Invalid dateRange '{name}'. Must be one of: {', '.join(DATE_WINDOWS)}",
        field="dateRange",
    )


def parse_date_param(raw: str, field_name: str) -> Tuple[datetime, bool]:
    """
    Parse a query-string date.

    Returns (value, date_only). Date-only strings ("2025-03-15") become UTC
    midnight; naive datetimes are taken as UTC.
    """
    value = raw.strip()
    try:
        if len(value) == 10:
            return _start_of_day(date.fromisoformat(value)), True
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid date for {field_name}: '{raw}'", field=field_name)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed, False


def _as_values(value: Union[None, str, Iterable[Any]]) -> Tuple[Any, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    cleaned = []
    for item in value:
        if isinstance(item, str):
            item = item.strip()
            if not item:
                continue
        if item is None:
            continue
        cleaned.append(item)
    return tuple(cleaned)


# ── Builder ───────────────────────────────────────────────────────────────

class QueryFilterBuilder:
    """
    Accumulates clauses from optional inputs. Every method ignores an absent
    input, so callers pass request parameters straight through.
    """

    def __init__(self, default_limit: int = 10, max_limit: int = MAX_PAGE_SIZE):
        self._clauses: list = []
        self._sort: Tuple[SortKey, ...] = ()
        self._default_limit = default_limit
        self._max_limit = max_limit
        self._pagination = Pagination(page=1, limit=default_limit)

    def search(self, term: Optional[str], fields: Sequence[str]) -> "QueryFilterBuilder":
        if term and term.strip():
            self._clauses.append(TextSearch(fields=tuple(fields), term=term.strip()))
        return self

    def any_of(self, field_name: str, value: Union[None, str, Iterable[Any]]) -> "QueryFilterBuilder":
        values = _as_values(value)
        if values:
            self._clauses.append(AnyOf(field=field_name, values=values))
        return self

    def equals(self, field_name: str, value: Any) -> "QueryFilterBuilder":
        if value is not None and value != "":
            self._clauses.append(AnyOf(field=field_name, values=(value,)))
        return self

    def at_most(self, field_name: str, value: Optional[float]) -> "QueryFilterBuilder":
        if value is not None:
            self._clauses.append(Range(field=field_name, upper=value))
        return self

    def at_least(self, field_name: str, value: Any) -> "QueryFilterBuilder":
        if value is not None:
            self._clauses.append(Range(field=field_name, lower=value))
        return self

    def date_range(
        self,
        field_name: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        window: Optional[str] = None,
        today: Optional[date] = None,
    ) -> "QueryFilterBuilder":
        """
        Explicit bounds win over a named window. A date-only `to_date`
        covers that whole day.
        """
        if from_date or to_date:
            lower = parse_date_param(from_date, "fromDate")[0] if from_date else None
            upper = None
            exclusive = False
            if to_date:
                upper, date_only = parse_date_param(to_date, "toDate")
                if date_only:
                    upper = upper + timedelta(days=1)
                    exclusive = True
            if lower and upper and lower > upper:
                raise ValidationError("fromDate must not be after toDate", field="fromDate")
            self._clauses.append(
                Range(field=field_name, lower=lower, upper=upper, upper_exclusive=exclusive)
            )
        elif window:
            start, end = resolve_date_window(window, today or datetime.now(timezone.utc).date())
            self._clauses.append(
                Range(field=field_name, lower=start, upper=end, upper_exclusive=True)
            )
        return self

    def sort_by(self, *keys: SortKey) -> "QueryFilterBuilder":
        self._sort = tuple(keys)
        return self

    def paginate(self, page: Optional[int], limit: Optional[int]) -> "QueryFilterBuilder":
        page = page if page and page > 0 else 1
        limit = limit if limit and limit > 0 else self._default_limit
        self._pagination = Pagination(page=page, limit=min(limit, self._max_limit))
        return self

    def build(self) -> QueryFilter:
        return QueryFilter(
            clauses=tuple(self._clauses),
            sort=self._sort,
            pagination=self._pagination,
        )
