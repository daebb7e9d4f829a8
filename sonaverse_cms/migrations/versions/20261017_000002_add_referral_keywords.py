"""Add referral keyword counts

Revision ID: 20261017_000002
Revises: 20260301_000001
Create Date: 2026-10-17 00:00:02.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261017_000002"
down_revision: Union[str, None] = "20260301_000001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "referral_keywords",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("keyword", sa.String(length=100), nullable=False),
        sa.Column("search_engine", sa.String(length=32), nullable=False),
        sa.Column("referrer_url", sa.String(length=1024), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("last_used", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "keyword", "search_engine", name="uq_referral_keywords_engine"
        ),
    )
    op.create_index(
        "ix_referral_keywords_last_used", "referral_keywords", ["last_used"]
    )


def downgrade() -> None:
    op.drop_index("ix_referral_keywords_last_used", table_name="referral_keywords")
    op.drop_table("referral_keywords")
