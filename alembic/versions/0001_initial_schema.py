"""Dashboard schema: users, payees, sites with hstore bags, memberships, categories, videos.

The reporting tables (revenue_reports, health_checks,
mat_premiere_revenue_summaries) live in the reporting database and are
owned by the reporting pipeline, so they are not created here.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    ]


def _bag(name: str) -> sa.Column:
    return sa.Column(name, postgresql.HSTORE(), nullable=False, server_default=sa.text("''::hstore"))


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS hstore")

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("roles_mask", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("jwt_secret", sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "payees",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("uuid", sa.Text(), nullable=False, unique=True),
        sa.Column("tipalti_completed", sa.Boolean(), nullable=True, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("slug", sa.Text(), nullable=False),
        sa.Column("iab_code", sa.Text(), nullable=True),
        sa.Column("parent_id", sa.Integer(), sa.ForeignKey("categories.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_categories_slug", "categories", ["slug"])

    op.create_table(
        "sites",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("domain", sa.Text(), nullable=True),
        sa.Column("slug", sa.Text(), nullable=True),
        sa.Column("test_site", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("anniversary_on", sa.Date(), nullable=True),
        sa.Column("live_on", sa.Date(), nullable=True),
        sa.Column("payee_id", sa.Integer(), sa.ForeignKey("payees.id"), nullable=True),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id"), nullable=True),
        _bag("profile"),
        _bag("settings"),
        _bag("social_media"),
        *_timestamps(),
    )
    op.create_index("ix_sites_domain", "sites", ["domain"])
    op.create_index("ix_sites_slug", "sites", ["slug"])
    op.create_index("ix_sites_payee_id", "sites", ["payee_id"])

    op.create_table(
        "site_users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("site_id", sa.Integer(), sa.ForeignKey("sites.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("roles_mask", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_site_users_site_id", "site_users", ["site_id"])
    op.create_index("ix_site_users_user_id", "site_users", ["user_id"])

    op.create_table(
        "categories_sites",
        sa.Column("site_id", sa.Integer(), sa.ForeignKey("sites.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
        *_timestamps(),
    )

    op.create_table(
        "videos",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("site_id", sa.Integer(), sa.ForeignKey("sites.id", ondelete="CASCADE"), nullable=False),
        sa.Column("slug", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_videos_site_id", "videos", ["site_id"])
    op.create_index("ix_videos_slug", "videos", ["slug"], unique=True)


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    for table in ("videos", "categories_sites", "site_users", "sites", "categories", "payees", "users"):
        op.drop_table(table)
    # The hstore extension may be shared with other schemas; leave it installed.
