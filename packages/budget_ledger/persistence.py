"""Persistence integration for budget_ledger.

Functions here write and read the ``lg_*`` tables owned by ``libs/db``
through a caller-provided SQLAlchemy session. They never commit: the caller's
``session_scope`` decides, so one import batch lands (or rolls back) as a
whole.

There is no duplicate detection. Importing the same statement twice stores
every row twice.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.ledger import LgBank, LgCategory, LgTransaction

from .logging_setup import get_logger
from .models import CanonicalTransaction, LedgerEntry

logger = get_logger(__name__)


def _json_safe(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def _raw_record(row: Mapping[str, Any]) -> dict[str, Any]:
    # JSON columns need plain values; keep header labels as-is.
    return {str(k): _json_safe(v) for k, v in row.items()}


def persist_transactions(
    session: Session,
    *,
    user_id: str,
    transactions: Iterable[CanonicalTransaction],
    bank_id: str | None = None,
) -> list[LgTransaction]:
    """Add one ``lg_transactions`` row per transaction and flush.

    ``category_source`` records which tier assigned the category (``user`` /
    ``rule``) or ``unknown`` for uncategorized rows.
    """

    if bank_id is not None:
        bank = session.get(LgBank, bank_id)
        if bank is None or bank.user_id != user_id:
            raise ValueError(f"unknown bank for user: {bank_id!r}")

    rows: list[LgTransaction] = []
    for tx in transactions:
        rows.append(
            LgTransaction(
                user_id=user_id,
                bank_id=bank_id,
                category_id=tx.category_id,
                date=date.fromisoformat(tx.date),
                description=tx.description,
                amount=tx.amount,
                currency=tx.currency,
                needs_review=tx.needs_review,
                category_source=tx.match_source if tx.category_id and tx.match_source else "unknown",
                raw_record=_raw_record(tx.source_row),
            )
        )
    session.add_all(rows)
    session.flush()
    logger.info("Stored %d transactions for user %s", len(rows), user_id)
    return rows


def load_ledger_entries(session: Session, *, user_id: str) -> list[LedgerEntry]:
    """All transactions of ``user_id`` with their category, oldest first."""

    stmt = (
        select(
            LgTransaction.date,
            LgTransaction.amount,
            LgTransaction.description,
            LgTransaction.category_id,
            LgCategory.name,
            LgCategory.icon,
        )
        .outerjoin(LgCategory, LgCategory.id == LgTransaction.category_id)
        .where(LgTransaction.user_id == user_id)
        .order_by(LgTransaction.date, LgTransaction.created_at, LgTransaction.id)
    )
    entries: list[LedgerEntry] = []
    for d, amount, description, category_id, name, icon in session.execute(stmt):
        entries.append(
            LedgerEntry(
                date=d.isoformat(),
                amount=Decimal(amount),
                description=description,
                category_id=category_id,
                category_name=name,
                category_icon=icon,
            )
        )
    return entries


def create_bank(session: Session, *, user_id: str, name: str, color: str | None = None) -> LgBank:
    bank = LgBank(user_id=user_id, name=name.strip())
    if color:
        bank.color = color
    session.add(bank)
    session.flush()
    return bank


__all__ = ["persist_transactions", "load_ledger_entries", "create_bank"]
