"""
WellNest Backend — Store Adapter
=================================

What:  Compiles a QueryFilter into SQLAlchemy statements and runs paged queries.
Why:   The builder speaks in API field paths ("fees.followUp", "isFeatured");
       only this module knows which column each path lands on and whether
       that column is an ARRAY.
How:   Each resource service passes a FieldMap (API path → mapped column).
       Clauses compile to:
           TextSearch → OR of column.icontains(term) (LIKE wildcards escaped)
           AnyOf      → column IN (...) or, for ARRAY columns, column && ARRAY[...]
           Range      → column >= lower AND column <= / < upper

Error translation:
    Services wrap store calls in `store_errors()`, which maps SQLAlchemy
    failures onto the application's taxonomy:
        IntegrityError                    → ConflictError (409)
        OperationalError / InterfaceError → ServiceUnavailableError (503)
        pool TimeoutError                 → GatewayTimeoutError (504)
        any other SQLAlchemyError         → DatabaseError (500)
"""

import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Generic, Iterator, List, Sequence, Tuple, TypeVar

from sqlalchemy import and_, func, or_, select
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    ConflictError,
    DatabaseError,
    GatewayTimeoutError,
    NotFoundError,
    ServiceUnavailableError,
)
from app.services.query_builder import AnyOf, Pagination, QueryFilter, Range, TextSearch

logger = logging.getLogger(__name__)

FieldMap = Dict[str, Any]

M = TypeVar("M")


@dataclass
class Page(Generic[M]):
    items: List[M]
    total: int
    pagination: Pagination

    @property
    def pages(self) -> int:
        return self.pagination.pages_for(self.total)


def parse_identifier(raw: Any, resource: str) -> uuid.UUID:
    """A malformed id can never match a record, so it is reported as not found."""
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except (ValueError, TypeError, AttributeError):
        raise NotFoundError(resource=resource, resource_id=str(raw))


def _is_array(column) -> bool:
    return isinstance(column.type, ARRAY)


def compile_clause(fields: FieldMap, clause) -> Any:
    if isinstance(clause, TextSearch):
        return or_(
            *[fields[name].icontains(clause.term, autoescape=True) for name in clause.fields]
        )

    if isinstance(clause, AnyOf):
        column = fields[clause.field]
        values = [v.value if hasattr(v, "value") else v for v in clause.values]
        if _is_array(column):
            return column.overlap(values)
        if len(values) == 1:
            return column == values[0]
        return column.in_(values)

    if isinstance(clause, Range):
        column = fields[clause.field]
        parts = []
        if clause.lower is not None:
            parts.append(column >= clause.lower)
        if clause.upper is not None:
            parts.append(column < clause.upper if clause.upper_exclusive else column <= clause.upper)
        return and_(*parts)

    raise TypeError(f"Unknown clause: {clause!r}")


def compile_filter(fields: FieldMap, qf: QueryFilter) -> Tuple[list, list]:
    """Returns (where conditions, order_by expressions)."""
    conditions = [compile_clause(fields, clause) for clause in qf.clauses]
    order_by = [
        fields[key.field].desc() if key.descending else fields[key.field].asc()
        for key in qf.sort
    ]
    return conditions, order_by


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    try:
        yield
    except IntegrityError as e:
        logger.warning("Integrity violation while %s: %s", action, e.orig)
        raise ConflictError("A record with this information already exists")
    except (OperationalError, InterfaceError) as e:
        logger.error("Store unreachable while %s: %s", action, e)
        raise ServiceUnavailableError()
    except PoolTimeoutError as e:
        logger.error("No pooled connection available while %s: %s", action, e)
        raise GatewayTimeoutError()
    except SQLAlchemyError as e:
        logger.error("Database error while %s: %s", action, e, exc_info=True)
        raise DatabaseError(context={"action": action, "error_type": type(e).__name__})


async def fetch_page(
    db: AsyncSession,
    model,
    fields: FieldMap,
    qf: QueryFilter,
    base: Sequence[Any] = (),
) -> Page:
    """
    Run the count and the page query for one listing.

    `base` holds conditions that are always applied (e.g. "role is an
    employee role"); they are ANDed with the compiled clauses.
    """
    conditions, order_by = compile_filter(fields, qf)
    where = [*base, *conditions]

    with store_errors(f"listing {model.__tablename__}"):
        total = (
            await db.execute(select(func.count()).select_from(model).where(*where))
        ).scalar_one()

        stmt = (
            select(model)
            .where(*where)
            .order_by(*order_by)
            .offset(qf.pagination.skip)
            .limit(qf.pagination.limit)
        )
        items = list((await db.execute(stmt)).scalars().all())

    return Page(items=items, total=total, pagination=qf.pagination)


async def fetch_one(db: AsyncSession, model, *conditions) -> Any:
    """First row matching all conditions, or None."""
    with store_errors(f"reading {model.__tablename__}"):
        result = await db.execute(select(model).where(*conditions).limit(1))
        return result.scalar_one_or_none()


async def count_where(db: AsyncSession, model, *conditions) -> int:
    with store_errors(f"counting {model.__tablename__}"):
        result = await db.execute(select(func.count()).select_from(model).where(*conditions))
        return result.scalar_one()
