from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def _new_id() -> str:
    return uuid.uuid4().hex


# ``user_id`` columns hold the opaque identifier issued by the external auth
# layer. There is no users table here; deleting a user is that layer's job.


# ---------------------------
# Reference: lg_banks
# ---------------------------


class LgBank(Base):
    __tablename__ = "lg_banks"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    color: Mapped[str | None] = mapped_column(String, nullable=True, default="#6366f1")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


# ---------------------------
# Reference: lg_categories
# ---------------------------


class LgCategory(Base):
    __tablename__ = "lg_categories"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    type: Mapped[str] = mapped_column(String, nullable=False, default="expense")
    color: Mapped[str | None] = mapped_column(String, nullable=True, default="#6366f1")
    icon: Mapped[str | None] = mapped_column(String, nullable=True, default="📁")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # System categories are seeded from the global rule table; custom ones are
    # created by the user.
    is_system_category: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("type in ('income','expense')", name="ck_lg_categories_type"),
    )


# ---------------------------
# Core: lg_transactions
# ---------------------------


class LgTransaction(Base):
    __tablename__ = "lg_transactions"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    # Both references survive deletion of the bank/category as NULL.
    bank_id: Mapped[str | None] = mapped_column(
        String(32), ForeignKey("lg_banks.id", ondelete="SET NULL"), nullable=True
    )
    category_id: Mapped[str | None] = mapped_column(
        String(32), ForeignKey("lg_categories.id", ondelete="SET NULL"), nullable=True
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    # Negative = outflow, positive = inflow.
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="RON")
    # Set when the import could not read the date and used the import day.
    needs_review: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    category_source: Mapped[str] = mapped_column(String, nullable=False, default="unknown")
    raw_record: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            "category_source in ('user','rule','manual','unknown')",
            name="ck_lg_tx_category_source",
        ),
        Index("ix_lg_transactions_user_date", "user_id", "date"),
    )


# ---------------------------
# Per-user keyword overrides: lg_user_keywords
# ---------------------------


class LgUserKeyword(Base):
    __tablename__ = "lg_user_keywords"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    keyword: Mapped[str] = mapped_column(String, nullable=False)
    # A keyword is meaningless without its category, so it goes with it.
    category_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("lg_categories.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (UniqueConstraint("user_id", "keyword", name="uq_lg_user_keywords_user_keyword"),)


__all__ = [
    "Base",
    "LgBank",
    "LgCategory",
    "LgTransaction",
    "LgUserKeyword",
]
