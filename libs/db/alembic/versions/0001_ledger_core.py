# ruff: noqa: I001
"""Ledger core tables: banks, categories, transactions, user keywords.

Revision ID: 0001_ledger_core
Revises: None
Create Date: 2025-12-20
"""

from __future__ import annotations  # ruff: noqa: I001

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_ledger_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "lg_banks",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("color", sa.String(), nullable=True, server_default=sa.text("'#6366f1'")),
        *_timestamps(),
    )
    op.create_index("ix_lg_banks_user_id", "lg_banks", ["user_id"])

    op.create_table(
        "lg_categories",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False, server_default=sa.text("'expense'")),
        sa.Column("color", sa.String(), nullable=True, server_default=sa.text("'#6366f1'")),
        sa.Column("icon", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "is_system_category",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        *_timestamps(),
        sa.CheckConstraint("type in ('income','expense')", name="ck_lg_categories_type"),
    )
    op.create_index("ix_lg_categories_user_id", "lg_categories", ["user_id"])

    op.create_table(
        "lg_transactions",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column(
            "bank_id",
            sa.String(32),
            sa.ForeignKey("lg_banks.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "category_id",
            sa.String(32),
            sa.ForeignKey("lg_categories.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default=sa.text("'RON'")),
        sa.Column("needs_review", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "category_source", sa.String(), nullable=False, server_default=sa.text("'unknown'")
        ),
        sa.Column("raw_record", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "category_source in ('user','rule','manual','unknown')",
            name="ck_lg_tx_category_source",
        ),
    )
    op.create_index("ix_lg_transactions_user_date", "lg_transactions", ["user_id", "date"])

    op.create_table(
        "lg_user_keywords",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("keyword", sa.String(), nullable=False),
        sa.Column(
            "category_id",
            sa.String(32),
            sa.ForeignKey("lg_categories.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.UniqueConstraint("user_id", "keyword", name="uq_lg_user_keywords_user_keyword"),
    )
    op.create_index("ix_lg_user_keywords_user_id", "lg_user_keywords", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_lg_user_keywords_user_id", table_name="lg_user_keywords")
    op.drop_table("lg_user_keywords")
    op.drop_index("ix_lg_transactions_user_date", table_name="lg_transactions")
    op.drop_table("lg_transactions")
    op.drop_index("ix_lg_categories_user_id", table_name="lg_categories")
    op.drop_table("lg_categories")
    op.drop_index("ix_lg_banks_user_id", table_name="lg_banks")
    op.drop_table("lg_banks")
