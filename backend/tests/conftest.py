"""
WellNest Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (mocked DB, API client, temp files,
       ready-made accounts and tokens).
How:   Environment variables are set BEFORE any `app` import so the settings
       singleton picks them up. No real database is needed: routes get a mock
       AsyncSession through FastAPI's dependency_overrides.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── db_result: builds fake `Result` objects for `session.execute`
    ├── temp_storage: Temporary directory for upload tests
    ├── sample_image_bytes: Minimal JPEG bytes
    ├── libmagic: content sniffing, skipped where libmagic is not installed
    ├── make_user / make_event / make_practitioner: ORM row factories
    ├── make_principal: Principal factory
    ├── make_token: signed bearer token for an account
    ├── test_client: HTTPX AsyncClient wired to the app with the mock session
    └── as_principal: signs a Principal in without a token
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from typing import Optional
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

# Override settings for testing BEFORE any app imports
os.environ["JWT_SECRET"] = "test-jwt-secret-not-real"
os.environ["MASTER_SECURITY_CODE"] = "test-master-code"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="wellnest_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["EXPOSE_TEMPORARY_PASSWORD"] = "false"
os.environ["KEEPALIVE_INTERVAL_SECONDS"] = "0"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.models.enums import AccountStatus, Permission, Role
from app.models.event import Event
from app.models.practitioner import Practitioner, slugify
from app.models.user import User
from app.services.authorization import Principal


# ══════════════════════════════════════════════════════════════════════════
# Helpers
# ══════════════════════════════════════════════════════════════════════════

def result_with(scalar=None, items=None, rows=None, rowcount=None) -> MagicMock:
    """
    Build a fake SQLAlchemy Result.

    scalar → .scalar_one() / .scalar_one_or_none()
    items  → .scalars().all()
    rows   → .all()
    """
    result = MagicMock()
    result.scalar_one.return_value = scalar
    result.scalar_one_or_none.return_value = scalar
    result.scalars.return_value.all.return_value = list(items or [])
    result.all.return_value = list(rows or [])
    result.rowcount = rowcount
    return result


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.get.return_value = event
        mock_db_session.execute.side_effect = [result_with(scalar=3), result_with(items=[...])]
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock(return_value=None)
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def db_result():
    return result_with


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "uploads"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def libmagic():
    """Skips the test when python-magic or the libmagic library is missing."""
    return pytest.importorskip("magic")


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def make_user():
    """Factory for fully populated `User` rows (no database involved)."""

    def _make(
        role: Role = Role.ADMIN,
        status: AccountStatus = AccountStatus.ACTIVE,
        permissions=(),
        **overrides,
    ) -> User:
        now = datetime.now(timezone.utc)
        values = dict(
            id=uuid4(),
            name="Test Employee",
            email=f"employee-{uuid4().hex[:8]}@wellnest.org",
            password_hash="not-a-real-hash",
            role=role.value,
            phone=None,
            department="Operations",
            permissions=[p.value if hasattr(p, "value") else p for p in permissions],
            status=status.value,
            is_email_verified=False,
            last_login=None,
            must_change_password=False,
            profile_image=None,
            created_by=None,
            updated_by=None,
            created_at=now,
            updated_at=now,
        )
        values.update(overrides)
        return User(**values)

    return _make


@pytest.fixture
def make_principal():
    def _make(
        role: Role = Role.ADMIN,
        permissions=(),
        status: AccountStatus = AccountStatus.ACTIVE,
        **overrides,
    ) -> Principal:
        values = dict(
            id=uuid4(),
            name="Test Caller",
            email="caller@wellnest.org",
            role=role,
            department="Operations",
            permissions=list(permissions),
            status=status,
        )
        values.update(overrides)
        return Principal(**values)

    return _make


@pytest.fixture
def make_event():
    def _make(**overrides) -> Event:
        now = datetime.now(timezone.utc)
        values = dict(
            id=uuid4(),
            title="Morning Mindfulness",
            description="A gentle introduction to guided meditation.",
            date=(now + timedelta(days=3)).replace(hour=0, minute=0, second=0, microsecond=0),
            time="9:00 AM",
            location="Community Hall",
            type="workshop",
            status="upcoming",
            is_featured=False,
            registered_attendees=0,
            image_url="",
            registration_url="",
            organizer_id=None,
            created_by=None,
            updated_by=None,
            created_at=now,
            updated_at=now,
        )
        values.update(overrides)
        return Event(**values)

    return _make


@pytest.fixture
def make_practitioner():
    def _make(**overrides) -> Practitioner:
        now = datetime.now(timezone.utc)
        values = dict(
            id=uuid4(),
            user_id=None,
            name="Dr. Jane Doe",
            title="Licensed Therapist",
            specialty="Yoga Therapy",
            experience="10 years",
            bio="Helps clients manage stress through movement and breath.",
            locations=["Downtown"],
            email=f"practitioner-{uuid4().hex[:8]}@wellnest.org",
            phone="555-0100",
            address=None,
            website=None,
            fee_initial=120.0,
            fee_follow_up=90.0,
            insurances=["Aetna"],
            payment_options=["Credit Card"],
            session_types=["In-person"],
            availability=None,
            education=None,
            image_url=None,
            status="active",
            is_featured=False,
            created_by=None,
            updated_by=None,
            created_at=now,
            updated_at=now,
        )
        values.update(overrides)
        values.setdefault("slug", slugify(values["name"]))
        return Practitioner(**values)

    return _make


@pytest.fixture
def make_token():
    """Signed bearer token for an account, optionally issued at a fixed time."""
    from app.services.auth_service import auth_service

    def _make(account: User, issued_at: Optional[datetime] = None) -> str:
        return auth_service.create_access_token(account, now=issued_at)

    return _make


@pytest_asyncio.fixture
async def test_client(mock_db_session):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    The database dependency yields `mock_db_session`; the lifespan does not run,
    so no keep-alive task is started.
    """
    from app.database import get_db_session
    from app.main import app

    async def _override_db():
        yield mock_db_session

    app.dependency_overrides[get_db_session] = _override_db
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def as_principal():
    """
    Skip token verification and act as the given Principal.

    Usage:
        as_principal(make_principal(role=Role.STAFF))
    """
    from app.dependencies import get_current_principal
    from app.main import app

    def _apply(principal: Principal) -> Principal:
        app.dependency_overrides[get_current_principal] = lambda: principal
        return principal

    return _apply
