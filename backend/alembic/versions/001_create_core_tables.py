"""Create users, practitioners and events tables

Revision ID: 001
Revises: None
Create Date: 2025-01-10 00:00:00.000000+00:00

What:  Creates the three tables behind the directory and events API.
How:   PostgreSQL-specific types: UUID primary keys, TIMESTAMP WITH TIME ZONE,
       and text ARRAY columns for the multi-value practitioner fields.

Order matters: practitioners and events reference users.id, so users is
created first and dropped last.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _user_ref(name: str) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )


def _timestamps() -> list:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        _uuid_pk(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'user'")),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("department", sa.String(50), nullable=True),
        sa.Column(
            "permissions",
            postgresql.ARRAY(sa.String(50)),
            nullable=False,
            server_default=sa.text("'{}'"),
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'active'")),
        sa.Column("is_email_verified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("last_login", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("must_change_password", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("profile_image", sa.String(500), nullable=True),
        _user_ref("created_by"),
        _user_ref("updated_by"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("idx_users_role_status", "users", ["role", "status"])
    op.create_index("idx_users_created_at", "users", [sa.text("created_at DESC")])

    # ── practitioners ─────────────────────────────────────────────────────
    op.create_table(
        "practitioners",
        _uuid_pk(),
        _user_ref("user_id"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("specialty", sa.String(200), nullable=False),
        sa.Column("experience", sa.String(100), nullable=False),
        sa.Column("bio", sa.String(1000), nullable=False),
        sa.Column("locations", postgresql.ARRAY(sa.String(200)), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(30), nullable=False),
        sa.Column("address", sa.String(300), nullable=True),
        sa.Column("website", sa.String(500), nullable=True),
        sa.Column("fee_initial", sa.Numeric(10, 2), nullable=False),
        sa.Column("fee_follow_up", sa.Numeric(10, 2), nullable=False),
        sa.Column(
            "insurances",
            postgresql.ARRAY(sa.String(100)),
            nullable=False,
            server_default=sa.text("'{}'"),
        ),
        sa.Column(
            "payment_options",
            postgresql.ARRAY(sa.String(100)),
            nullable=False,
            server_default=sa.text("'{}'"),
        ),
        sa.Column("session_types", postgresql.ARRAY(sa.String(100)), nullable=False),
        sa.Column("availability", sa.String(500), nullable=True),
        sa.Column("education", sa.String(500), nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'active'")),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("slug", sa.String(120), nullable=False),
        _user_ref("created_by"),
        _user_ref("updated_by"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_practitioners_email"),
        sa.CheckConstraint("fee_initial >= 0", name="ck_practitioners_fee_initial_nonnegative"),
        sa.CheckConstraint("fee_follow_up >= 0", name="ck_practitioners_fee_follow_up_nonnegative"),
    )
    op.create_index(
        "idx_practitioners_status_featured", "practitioners", ["status", "is_featured"]
    )
    # GIN indexes back the && (overlap) filters of the public directory
    for column in ("locations", "insurances", "payment_options", "session_types"):
        op.create_index(
            f"idx_practitioners_{column}",
            "practitioners",
            [column],
            postgresql_using="gin",
        )

    # ── events ────────────────────────────────────────────────────────────
    op.create_table(
        "events",
        _uuid_pk(),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.String(2000), nullable=False),
        sa.Column("date", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("time", sa.String(50), nullable=False),
        sa.Column("location", sa.String(200), nullable=False),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'upcoming'")),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("registered_attendees", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("image_url", sa.String(500), nullable=False, server_default=sa.text("''")),
        sa.Column("registration_url", sa.String(500), nullable=False, server_default=sa.text("''")),
        _user_ref("organizer_id"),
        _user_ref("created_by"),
        _user_ref("updated_by"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("registered_attendees >= 0", name="ck_events_attendees_nonnegative"),
    )
    op.create_index("idx_events_status_date", "events", ["status", "date"])
    op.create_index("idx_events_featured_date", "events", ["is_featured", "date"])


def downgrade() -> None:
    """Drop all three tables. Destructive: every record is lost."""
    op.drop_index("idx_events_featured_date", table_name="events")
    op.drop_index("idx_events_status_date", table_name="events")
    op.drop_table("events")

    for column in ("locations", "insurances", "payment_options", "session_types"):
        op.drop_index(f"idx_practitioners_{column}", table_name="practitioners")
    op.drop_index("idx_practitioners_status_featured", table_name="practitioners")
    op.drop_table("practitioners")

    op.drop_index("idx_users_created_at", table_name="users")
    op.drop_index("idx_users_role_status", table_name="users")
    op.drop_table("users")
