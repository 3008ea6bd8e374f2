"""Data models and type aliases for ``budget_ledger``.

Import-side records (raw rows, canonical transactions, keyword overrides) are
plain frozen dataclasses: they are produced and consumed in-process and never
serialized directly. Report-side records are pydantic models because they form
the response contract handed to API/CLI callers as JSON.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

# ---------------------------------------------------------------------------
# Import side
# ---------------------------------------------------------------------------

# One input record: header label -> raw cell value, in file column order.
# Header labels may be in any supported language; values are strings or
# numbers (XLSX cells), ``None`` for blank cells. No per-bank schema is
# assumed.
type RawRow = Mapping[str, Any]

type MatchSource = Literal["user", "rule"]


@dataclass(frozen=True, slots=True)
class CanonicalTransaction:
    """A normalized transaction produced by the row parser.

    ``amount`` is quantized to two decimals; negative means money left the
    account. ``needs_review`` marks rows whose date could not be read and was
    replaced with the import day. The ``category_*`` fields are filled in by
    the classifier and stay ``None`` for uncategorized rows.
    """

    idx: int
    date: str
    description: str
    amount: Decimal
    currency: str
    source_row: RawRow = field(repr=False, compare=False)
    needs_review: bool = False
    category_id: str | None = None
    category_name: str | None = None
    match_source: MatchSource | None = None


@dataclass(frozen=True, slots=True)
class UserKeyword:
    """A user-owned override: ``keyword`` found in a description -> ``category_id``."""

    user_id: str
    keyword: str
    category_id: str


@dataclass(frozen=True, slots=True)
class CategoryMatch:
    """Outcome of a successful classification.

    Tier-1 (user keyword) matches carry ``category_id``; tier-2 (global rule)
    matches carry ``category_name`` and leave the id to be resolved against
    the user's category rows.
    """

    source: MatchSource
    keyword: str
    category_id: str | None = None
    category_name: str | None = None


@dataclass(frozen=True, slots=True)
class ImportResult:
    transactions: list[CanonicalTransaction]
    categorized: int
    skipped: int


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    """A persisted transaction as seen by the report layer."""

    date: str
    amount: Decimal
    category_id: str | None = None
    category_name: str | None = None
    category_icon: str | None = None
    description: str = ""


# ---------------------------------------------------------------------------
# Report side
# ---------------------------------------------------------------------------


class Severity(StrEnum):
    NONE = "none"
    CRITICAL = "critical"
    HIGH = "high"
    NORMAL = "normal"
    BELOW_AVERAGE = "below-average"


class PivotCell(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: Decimal = Decimal("0")
    count: int = 0
    change_pct: Decimal | None = None


class MonthChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    month: str
    change_pct: Decimal


class PivotRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    category_id: str
    category_name: str
    category_icon: str
    months: dict[str, PivotCell]
    total: Decimal
    average: Decimal
    max_increase: MonthChange | None = None
    max_decrease: MonthChange | None = None


class PivotReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    months: list[str]
    rows: list[PivotRow]


class ReportSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_expenses: Decimal
    total_income: Decimal
    balance: Decimal


class CategoryTotal(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    icon: str
    total: Decimal


class MonthTotal(BaseModel):
    model_config = ConfigDict(frozen=True)

    month: str
    total: Decimal


class DashboardStats(BaseModel):
    """All-time balance and current-month flows, independent of the report period."""

    model_config = ConfigDict(frozen=True)

    total_balance: Decimal
    monthly_income: Decimal
    monthly_expenses: Decimal
    transaction_count: int


class Report(BaseModel):
    """Full report response: summary cards, chart series, pivot table, and top movers."""

    model_config = ConfigDict(frozen=True)

    period: str
    summary: ReportSummary
    pivot: PivotReport
    top_increases: list[PivotRow]
    top_decreases: list[PivotRow]
    by_category: list[CategoryTotal]
    by_month: list[MonthTotal]
    stats: DashboardStats


__all__ = [
    "RawRow",
    "MatchSource",
    "CanonicalTransaction",
    "UserKeyword",
    "CategoryMatch",
    "ImportResult",
    "LedgerEntry",
    "Severity",
    "PivotCell",
    "MonthChange",
    "PivotRow",
    "PivotReport",
    "ReportSummary",
    "CategoryTotal",
    "MonthTotal",
    "DashboardStats",
    "Report",
]
