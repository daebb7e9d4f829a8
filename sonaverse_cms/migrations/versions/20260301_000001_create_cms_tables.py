"""Create CMS tables

Revision ID: 20260301_000001
Revises:
Create Date: 2026-03-01 00:00:01.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20260301_000001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )


def upgrade() -> None:
    op.create_table(
        "admin_users",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("username", sa.String(length=128), nullable=False),
        sa.Column("password_hash", sa.String(length=512), nullable=False),
        sa.Column("role", sa.String(length=32), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        _created_at(),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
    )
    op.create_index("ix_admin_users_email", "admin_users", ["email"], unique=True)

    op.create_table(
        "press_releases",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("slug", sa.String(length=256), nullable=False),
        sa.Column("press_name", sa.JSON(), nullable=False),
        sa.Column("content", sa.JSON(), nullable=False),
        sa.Column("thumbnail", sa.String(length=1024), nullable=True),
        sa.Column("external_link", sa.String(length=1024), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        _created_at(),
        _created_at("last_updated"),
        sa.Column("updated_by", sa.String(length=128), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_press_releases_slug", "press_releases", ["slug"], unique=True)

    op.create_table(
        "sonaverse_stories",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("slug", sa.String(length=256), nullable=False),
        sa.Column("content", sa.JSON(), nullable=False),
        sa.Column("youtube_url", sa.String(length=1024), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("is_main", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("author_id", sa.String(length=32), nullable=True),
        _created_at(),
        _created_at("last_updated"),
        sa.Column("updated_by", sa.String(length=128), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_sonaverse_stories_slug", "sonaverse_stories", ["slug"], unique=True
    )

    op.create_table(
        "products",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("slug", sa.String(length=256), nullable=False),
        sa.Column("name", sa.JSON(), nullable=False),
        sa.Column("description", sa.JSON(), nullable=False),
        sa.Column("category", sa.String(length=128), nullable=False),
        sa.Column("features", sa.JSON(), nullable=False),
        sa.Column("specifications", sa.JSON(), nullable=False),
        sa.Column("main_image_url", sa.String(length=1024), nullable=True),
        sa.Column("gallery_images", sa.JSON(), nullable=False),
        sa.Column("detail_images", sa.JSON(), nullable=False),
        sa.Column("external_link", sa.String(length=1024), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        _created_at(),
        _created_at("last_updated"),
        sa.Column("updated_by", sa.String(length=128), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_products_slug", "products", ["slug"], unique=True)
    op.create_index(
        "ix_products_category_active", "products", ["category", "is_active"]
    )

    op.create_table(
        "pages",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("page_key", sa.String(length=128), nullable=False),
        sa.Column("sections", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        _created_at("last_updated"),
        sa.Column("updated_by", sa.String(length=128), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_pages_page_key", "pages", ["page_key"], unique=True)

    op.create_table(
        "inquiries",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("inquiry_type", sa.String(length=128), nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("company_name", sa.String(length=256), nullable=True),
        sa.Column("phone_number", sa.String(length=64), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("attached_files", sa.JSON(), nullable=False),
        sa.Column(
            "privacy_consented", sa.Boolean(), nullable=False, server_default="0"
        ),
        sa.Column(
            "status", sa.String(length=32), nullable=False, server_default="pending"
        ),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("responded_by", sa.String(length=128), nullable=True),
        _created_at("submitted_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_inquiries_status_submitted", "inquiries", ["status", "submitted_at"]
    )

    op.create_table(
        "inquiry_status_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("inquiry_id", sa.String(length=32), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("changed_by", sa.String(length=128), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at("changed_at"),
        sa.ForeignKeyConstraint(
            ["inquiry_id"],
            ["inquiries.id"],
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_inquiry_status_history_inquiry_id",
        "inquiry_status_history",
        ["inquiry_id"],
    )

    op.create_table(
        "site_settings",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("site_name", sa.JSON(), nullable=False),
        sa.Column("site_description", sa.JSON(), nullable=False),
        sa.Column("contact_email", sa.String(length=320), nullable=False),
        sa.Column("contact_phone", sa.String(length=64), nullable=True),
        sa.Column("address", sa.JSON(), nullable=True),
        sa.Column("social_links", sa.JSON(), nullable=False),
        sa.Column("inquiry_categories", sa.JSON(), nullable=False),
        _created_at("last_updated"),
        sa.Column("updated_by", sa.String(length=128), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "visitor_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("page", sa.String(length=1024), nullable=False),
        sa.Column("session_id", sa.String(length=128), nullable=False),
        sa.Column("visit_date", sa.String(length=10), nullable=False),
        sa.Column("referrer", sa.String(length=1024), nullable=True),
        sa.Column("user_agent", sa.String(length=1024), nullable=True),
        sa.Column("ip", sa.String(length=64), nullable=True),
        _created_at("timestamp"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_visitor_logs_visit_date", "visitor_logs", ["visit_date"])
    op.create_index(
        "ix_visitor_logs_session_day", "visitor_logs", ["session_id", "visit_date"]
    )


def downgrade() -> None:
    op.drop_index("ix_visitor_logs_session_day", table_name="visitor_logs")
    op.drop_index("ix_visitor_logs_visit_date", table_name="visitor_logs")
    op.drop_table("visitor_logs")
    op.drop_table("site_settings")
    op.drop_index(
        "ix_inquiry_status_history_inquiry_id", table_name="inquiry_status_history"
    )
    op.drop_table("inquiry_status_history")
    op.drop_index("ix_inquiries_status_submitted", table_name="inquiries")
    op.drop_table("inquiries")
    op.drop_index("ix_pages_page_key", table_name="pages")
    op.drop_table("pages")
    op.drop_index("ix_products_category_active", table_name="products")
    op.drop_index("ix_products_slug", table_name="products")
    op.drop_table("products")
    op.drop_index("ix_sonaverse_stories_slug", table_name="sonaverse_stories")
    op.drop_table("sonaverse_stories")
    op.drop_index("ix_press_releases_slug", table_name="press_releases")
    op.drop_table("press_releases")
    op.drop_index("ix_admin_users_email", table_name="admin_users")
    op.drop_table("admin_users")
