"""Category x month pivot of outflows.

Only expenses (``amount < 0``) take part; amounts are reported as positive
magnitudes. Every row carries a cell for every month observed anywhere in the
input, so rows line up as a table. Month-over-month change is only defined
when the previous month of the same category had spending; a category that
never rose (or never fell) has no ``max_increase`` (``max_decrease``).

All arithmetic is ``Decimal``; totals are exact sums of the two-decimal
inputs and averages/percentages are left unrounded for the presentation
layer to format.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from .models import LedgerEntry, MonthChange, PivotCell, PivotReport, PivotRow, Severity

UNCATEGORIZED_ID = "__uncategorized"
UNCATEGORIZED_NAME = "Necategorizat"
UNCATEGORIZED_ICON = "❓"
DEFAULT_ICON = "📁"

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def month_of(iso_date: str) -> str:
    return iso_date[:7]


def aggregate(entries: Iterable[LedgerEntry]) -> PivotReport:
    """Build the pivot table for ``entries``."""

    # category id -> (name, icon, month -> [amount, count])
    groups: dict[str, tuple[str, str, dict[str, list]]] = {}
    months_seen: set[str] = set()

    for e in entries:
        if e.amount >= 0:
            continue
        if e.category_id:
            cid = e.category_id
            name = e.category_name or UNCATEGORIZED_NAME
            icon = e.category_icon or DEFAULT_ICON
        else:
            cid, name, icon = UNCATEGORIZED_ID, UNCATEGORIZED_NAME, UNCATEGORIZED_ICON
        month = month_of(e.date)
        months_seen.add(month)
        _, _, by_month = groups.setdefault(cid, (name, icon, {}))
        acc = by_month.setdefault(month, [_ZERO, 0])
        acc[0] += abs(e.amount)
        acc[1] += 1

    months = sorted(months_seen)
    rows = [_build_row(cid, name, icon, by_month, months) for cid, (name, icon, by_month) in groups.items()]
    # sorted() is stable: equal totals keep first-seen category order
    rows = sorted(rows, key=lambda r: r.total, reverse=True)
    return PivotReport(months=months, rows=rows)


def _build_row(
    category_id: str,
    name: str,
    icon: str,
    by_month: dict[str, list],
    months: Sequence[str],
) -> PivotRow:
    cells: dict[str, PivotCell] = {}
    total = _ZERO
    prev: Decimal | None = None
    max_increase: MonthChange | None = None
    max_decrease: MonthChange | None = None

    for m in months:
        amount, count = by_month.get(m, (_ZERO, 0))
        total += amount
        change: Decimal | None = None
        if prev is not None and prev > 0:
            change = (amount - prev) / prev * _HUNDRED
            # Strict comparisons: ties keep the earliest month.
            if change > 0 and (max_increase is None or change > max_increase.change_pct):
                max_increase = MonthChange(month=m, change_pct=change)
            if change < 0 and (max_decrease is None or change < max_decrease.change_pct):
                max_decrease = MonthChange(month=m, change_pct=change)
        cells[m] = PivotCell(amount=amount, count=count, change_pct=change)
        prev = amount

    average = total / len(months) if months else _ZERO
    return PivotRow(
        category_id=category_id,
        category_name=name,
        category_icon=icon,
        months=cells,
        total=total,
        average=average,
        max_increase=max_increase,
        max_decrease=max_decrease,
    )


def severity(amount: Decimal, average: Decimal) -> Severity:
    """Bucket a cell amount by its ratio to the row average."""

    if amount <= 0 or average <= 0:
        return Severity.NONE
    ratio = amount / average
    if ratio >= Decimal("1.5"):
        return Severity.CRITICAL
    if ratio >= Decimal("1.2"):
        return Severity.HIGH
    if ratio >= Decimal("0.8"):
        return Severity.NORMAL
    return Severity.BELOW_AVERAGE


def top_increases(rows: Iterable[PivotRow], limit: int = 5) -> list[PivotRow]:
    """Rows with the largest single-month increase, biggest first."""

    rising = [r for r in rows if r.max_increase is not None]
    rising.sort(key=lambda r: r.max_increase.change_pct, reverse=True)
    return rising[:limit]


def top_decreases(rows: Iterable[PivotRow], limit: int = 5) -> list[PivotRow]:
    """Rows with the steepest single-month drop, steepest first."""

    falling = [r for r in rows if r.max_decrease is not None]
    falling.sort(key=lambda r: r.max_decrease.change_pct)
    return falling[:limit]


__all__ = [
    "UNCATEGORIZED_ID",
    "UNCATEGORIZED_NAME",
    "UNCATEGORIZED_ICON",
    "aggregate",
    "month_of",
    "severity",
    "top_increases",
    "top_decreases",
]
