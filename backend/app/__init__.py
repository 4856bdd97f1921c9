"""
WellNest Backend — Application Package Initializer
===================================================

What: Marks the `app` directory as a Python package.
Why:  Enables module imports like `from app.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    This backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │     Routes + Dependencies (API)     │  ← HTTP concerns, auth guards
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Rules, safeguards, filter building
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    - Routes declare which capability they need; they never inspect roles themselves
    - The authorization policy and query filter builder are pure and need no HTTP or DB
    - Services own every business rule (last-admin, self-deletion, master code)
"""

__version__ = "1.0.0"
