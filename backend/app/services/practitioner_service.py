"""
WellNest Backend — Practitioner Service
========================================

What:  Admin and public directory listings, featured list and CRUD.
Who:   /api/practitioners (employee-guarded) and /api/public/practitioners.

Public directory rules:
    - only status = active is ever visible (listing and detail)
    - filters: specialty, location, insurance, paymentOption, sessionType
      (each one value or several), maxFee (follow-up fee at most)
    - sort featured first, then by name; 12 per page
"""

import logging
from typing import List, Optional, Sequence, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConflictError, NotFoundError
from app.models.enums import PractitionerStatus
from app.models.practitioner import Practitioner, slugify
from app.schemas.practitioner import PractitionerCreate, PractitionerUpdate
from app.services.authorization import Principal
from app.services.query_builder import QueryFilterBuilder, SortKey
from app.services.store import (
    FieldMap,
    Page,
    fetch_one,
    fetch_page,
    parse_identifier,
    store_errors,
)

logger = logging.getLogger(__name__)

PRACTITIONER_FIELDS: FieldMap = {
    "name": Practitioner.name,
    "specialty": Practitioner.specialty,
    "bio": Practitioner.bio,
    "email": Practitioner.email,
    "status": Practitioner.status,
    "isFeatured": Practitioner.is_featured,
    "locations": Practitioner.locations,
    "insurances": Practitioner.insurances,
    "paymentOptions": Practitioner.payment_options,
    "sessionTypes": Practitioner.session_types,
    "fees.initial": Practitioner.fee_initial,
    "fees.followUp": Practitioner.fee_follow_up,
    "createdAt": Practitioner.created_at,
}

PRACTITIONER_SEARCH_FIELDS = ("name", "specialty", "bio")

FEATURED_LIMIT = 5

Multi = Union[None, str, Sequence[str]]


class PractitionerService:
    """Business logic for the practitioner directory. Stateless."""

    async def list_practitioners(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        status: Optional[str] = None,
        specialty: Multi = None,
        is_featured: Optional[bool] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Page:
        qf = (
            QueryFilterBuilder(default_limit=10)
            .search(search, PRACTITIONER_SEARCH_FIELDS)
            .any_of("status", status)
            .any_of("specialty", specialty)
            .equals("isFeatured", is_featured)
            .sort_by(SortKey("isFeatured", descending=True), SortKey("createdAt", descending=True))
            .paginate(page, limit)
            .build()
        )
        return await fetch_page(db, Practitioner, PRACTITIONER_FIELDS, qf)

    async def list_public_practitioners(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        specialty: Multi = None,
        location: Multi = None,
        insurance: Multi = None,
        payment_option: Multi = None,
        session_type: Multi = None,
        max_fee: Optional[float] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Page:
        qf = (
            QueryFilterBuilder(default_limit=12)
            .equals("status", PractitionerStatus.ACTIVE.value)
            .search(search, PRACTITIONER_SEARCH_FIELDS)
            .any_of("specialty", specialty)
            .any_of("locations", location)
            .any_of("insurances", insurance)
            .any_of("paymentOptions", payment_option)
            .any_of("sessionTypes", session_type)
            .at_most("fees.followUp", max_fee)
            .sort_by(SortKey("isFeatured", descending=True), SortKey("name"))
            .paginate(page, limit)
            .build()
        )
        return await fetch_page(db, Practitioner, PRACTITIONER_FIELDS, qf)

    async def get_practitioner(self, db: AsyncSession, practitioner_id: str) -> Practitioner:
        uid = parse_identifier(practitioner_id, "practitioner")
        with store_errors("reading practitioner"):
            practitioner = await db.get(Practitioner, uid)
        if practitioner is None:
            raise NotFoundError(resource="practitioner", resource_id=str(practitioner_id))
        return practitioner

    async def get_public_practitioner(self, db: AsyncSession, practitioner_id: str) -> Practitioner:
        """Inactive and pending practitioners are reported as not found."""
        practitioner = await self.get_practitioner(db, practitioner_id)
        if practitioner.status != PractitionerStatus.ACTIVE.value:
            raise NotFoundError(resource="practitioner", resource_id=str(practitioner_id))
        return practitioner

    async def list_featured(self, db: AsyncSession) -> List[Practitioner]:
        stmt = (
            select(Practitioner)
            .where(
                Practitioner.status == PractitionerStatus.ACTIVE.value,
                Practitioner.is_featured.is_(True),
            )
            .order_by(Practitioner.name.asc())
            .limit(FEATURED_LIMIT)
        )
        with store_errors("listing featured practitioners"):
            return list((await db.execute(stmt)).scalars().all())

    async def _ensure_email_free(self, db: AsyncSession, email: str) -> None:
        if await fetch_one(db, Practitioner, Practitioner.email == email) is not None:
            raise ConflictError("A practitioner with this email already exists")

    async def create_practitioner(
        self, db: AsyncSession, data: PractitionerCreate, actor: Principal
    ) -> Practitioner:
        await self._ensure_email_free(db, data.email)

        values = data.model_dump(exclude={"fees"})
        values["status"] = data.status.value
        practitioner = Practitioner(
            **values,
            fee_initial=data.fees.initial,
            fee_follow_up=data.fees.follow_up,
            slug=slugify(data.name),
            created_by=actor.id,
        )
        db.add(practitioner)
        with store_errors("creating practitioner"):
            await db.flush()
        logger.info("Practitioner %s created by %s", practitioner.id, actor.id)
        return practitioner

    async def update_practitioner(
        self,
        db: AsyncSession,
        practitioner_id: str,
        data: PractitionerUpdate,
        actor: Principal,
    ) -> Practitioner:
        practitioner = await self.get_practitioner(db, practitioner_id)
        changes = data.model_dump(exclude_unset=True)

        new_email = changes.get("email")
        if new_email and new_email != practitioner.email:
            await self._ensure_email_free(db, new_email)

        fees = changes.pop("fees", None)
        if fees:
            if fees.get("initial") is not None:
                practitioner.fee_initial = fees["initial"]
            if fees.get("follow_up") is not None:
                practitioner.fee_follow_up = fees["follow_up"]

        for key, value in changes.items():
            setattr(practitioner, key, value.value if hasattr(value, "value") else value)
        if "name" in changes:
            practitioner.slug = slugify(practitioner.name)
        practitioner.updated_by = actor.id

        with store_errors("updating practitioner"):
            await db.flush()
        logger.info(
            "Practitioner %s updated by %s (fields: %s)",
            practitioner.id, actor.id, sorted(changes) + (["fees"] if fees else []),
        )
        return practitioner

    async def delete_practitioner(
        self, db: AsyncSession, practitioner_id: str, actor: Principal
    ) -> None:
        practitioner = await self.get_practitioner(db, practitioner_id)
        with store_errors("deleting practitioner"):
            await db.delete(practitioner)
            await db.flush()
        logger.info("Practitioner %s deleted by %s", practitioner.id, actor.id)


# ── Singleton Instance ────────────────────────────────────────────────────
practitioner_service = PractitionerService()
