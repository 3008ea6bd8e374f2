"""Report assembly on top of the pivot: period filter, summary, chart series."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal

from .models import CategoryTotal, DashboardStats, LedgerEntry, MonthTotal, Report, ReportSummary
from .pivot import UNCATEGORIZED_ICON, UNCATEGORIZED_NAME, aggregate, month_of, top_decreases, top_increases

type Period = Literal["current_month", "last_3_months", "last_6_months", "all"]

PERIODS: tuple[str, ...] = ("current_month", "last_3_months", "last_6_months", "all")
_PERIOD_MONTHS = {"current_month": 1, "last_3_months": 3, "last_6_months": 6}

_CENTS = Decimal("0.01")
_ZERO = Decimal("0")


def _q(d: Decimal) -> Decimal:
    return d.quantize(_CENTS, rounding=ROUND_HALF_UP)


def period_start(period: str, today: date) -> date | None:
    """First day of the window for ``period``; ``None`` for ``all``."""

    if period == "all":
        return None
    try:
        span = _PERIOD_MONTHS[period]
    except KeyError:
        raise ValueError(f"unknown period {period!r}; expected one of {', '.join(PERIODS)}") from None
    # Month index arithmetic: go back span-1 months from the current month.
    index = today.year * 12 + (today.month - 1) - (span - 1)
    return date(index // 12, index % 12 + 1, 1)


def filter_period(entries: Iterable[LedgerEntry], period: str, *, today: date | None = None) -> list[LedgerEntry]:
    start = period_start(period, today or date.today())
    if start is None:
        return list(entries)
    start_s = start.isoformat()
    return [e for e in entries if e.date >= start_s]


def summarize(entries: Iterable[LedgerEntry]) -> ReportSummary:
    expenses = _ZERO
    income = _ZERO
    for e in entries:
        if e.amount < 0:
            expenses += abs(e.amount)
        else:
            income += e.amount
    return ReportSummary(
        total_expenses=_q(expenses),
        total_income=_q(income),
        balance=_q(income - expenses),
    )


def expenses_by_category(entries: Iterable[LedgerEntry]) -> list[CategoryTotal]:
    """Outflow totals per category name, largest first."""

    totals: dict[str, list] = {}
    for e in entries:
        if e.amount >= 0:
            continue
        name = e.category_name or UNCATEGORIZED_NAME
        icon = e.category_icon or UNCATEGORIZED_ICON
        acc = totals.setdefault(name, [icon, _ZERO])
        acc[1] += abs(e.amount)
    items = [CategoryTotal(name=name, icon=icon, total=_q(total)) for name, (icon, total) in totals.items()]
    return sorted(items, key=lambda c: c.total, reverse=True)


def expenses_by_month(entries: Iterable[LedgerEntry]) -> list[MonthTotal]:
    """Outflow totals per ``YYYY-MM``, chronological."""

    totals: dict[str, Decimal] = {}
    for e in entries:
        if e.amount >= 0:
            continue
        m = month_of(e.date)
        totals[m] = totals.get(m, _ZERO) + abs(e.amount)
    return [MonthTotal(month=m, total=_q(totals[m])) for m in sorted(totals)]


def dashboard_stats(entries: Sequence[LedgerEntry], *, today: date | None = None) -> DashboardStats:
    """All-time balance plus income and expenses of the current month."""

    current = month_of((today or date.today()).isoformat())
    balance = _ZERO
    income = _ZERO
    expenses = _ZERO
    for e in entries:
        balance += e.amount
        if month_of(e.date) != current:
            continue
        if e.amount > 0:
            income += e.amount
        elif e.amount < 0:
            expenses += abs(e.amount)
    return DashboardStats(
        total_balance=_q(balance),
        monthly_income=_q(income),
        monthly_expenses=_q(expenses),
        transaction_count=len(entries),
    )


def build_report(
    entries: Iterable[LedgerEntry],
    *,
    period: str = "all",
    today: date | None = None,
    top_limit: int = 5,
) -> Report:
    """Summary, chart series, pivot table and top movers for ``period``.

    ``stats`` always covers the whole ledger; everything else is limited to
    ``period``.
    """

    everything = list(entries)
    selected = filter_period(everything, period, today=today)
    pivot = aggregate(selected)
    return Report(
        period=period,
        summary=summarize(selected),
        pivot=pivot,
        top_increases=top_increases(pivot.rows, limit=top_limit),
        top_decreases=top_decreases(pivot.rows, limit=top_limit),
        by_category=expenses_by_category(selected),
        by_month=expenses_by_month(selected),
        stats=dashboard_stats(everything, today=today),
    )


__all__ = [
    "Period",
    "PERIODS",
    "period_start",
    "filter_period",
    "summarize",
    "expenses_by_category",
    "expenses_by_month",
    "dashboard_stats",
    "build_report",
]
