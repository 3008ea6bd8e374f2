"""Row parser: raw rows -> canonical transactions.

Each row goes through the column detector and the date/amount normalizers.
A row that cannot produce a complete transaction raises :class:`RowError`
internally; the error is logged, counted as skipped, and the batch moves on.
Only the absence of *any* valid row is fatal (:class:`EmptyResultError`).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from ..config import LedgerSettings
from ..errors import EmptyResultError, RowError
from ..logging_setup import get_logger
from ..models import CanonicalTransaction, RawRow
from .amounts import normalize_amount
from .columns import DEFAULT_HEADER_TABLES, HeaderTables, detect_columns, load_header_tables
from .dates import normalize_date
from .readers import read_rows

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ParseOptions:
    """Knobs for a single parse run.

    ``strict_dates`` rejects rows whose date cannot be read; otherwise the row
    is kept with ``today`` as its date and ``needs_review=True``.
    """

    tables: HeaderTables = DEFAULT_HEADER_TABLES
    default_currency: str = "RON"
    strict_dates: bool = False
    today: date | None = None

    @classmethod
    def from_settings(cls, settings: LedgerSettings, *, today: date | None = None) -> ParseOptions:
        tables = (
            load_header_tables(settings.header_tables_path)
            if settings.header_tables_path is not None
            else DEFAULT_HEADER_TABLES
        )
        return cls(
            tables=tables,
            default_currency=settings.default_currency,
            strict_dates=settings.strict_dates,
            today=today,
        )


@dataclass(frozen=True, slots=True)
class ParseOutcome:
    transactions: list[CanonicalTransaction]
    skipped: int
    row_count: int
    issues: list[RowError] = field(default_factory=list)


def _currency(value: object, default: str) -> str:
    if isinstance(value, str):
        code = value.strip().upper()
        if len(code) == 3 and code.isalpha():
            return code
    return default


def parse_row(row: RawRow, index: int, *, options: ParseOptions) -> CanonicalTransaction:
    """Build one canonical transaction from ``row`` or raise :class:`RowError`."""

    cols = detect_columns(row, options.tables)

    if cols.date is None or (isinstance(cols.date, str) and not cols.date.strip()):
        raise RowError(index, "missing date")
    description = "" if cols.description is None else str(cols.description).strip()
    if not description:
        raise RowError(index, "missing description")
    if cols.amount is None or (isinstance(cols.amount, str) and not cols.amount.strip()):
        raise RowError(index, "missing amount")

    try:
        amount = normalize_amount(cols.amount, kind=cols.kind)
    except ValueError as exc:
        raise RowError(index, f"unparsable amount {cols.amount!r}") from exc

    iso, needs_review = normalize_date(cols.date, today=options.today)
    if needs_review:
        if options.strict_dates:
            raise RowError(index, f"unparsable date {cols.date!r}")
        logger.warning("row %d: could not parse date %r; using %s", index + 1, cols.date, iso)

    return CanonicalTransaction(
        idx=index,
        date=iso,
        description=description,
        amount=amount,
        currency=_currency(cols.currency, options.default_currency),
        source_row=row,
        needs_review=needs_review,
    )


def parse_rows(rows: Iterable[RawRow], *, options: ParseOptions | None = None) -> ParseOutcome:
    """Parse every row; bad rows are skipped and reported in ``issues``."""

    opts = options or ParseOptions()
    transactions: list[CanonicalTransaction] = []
    issues: list[RowError] = []
    row_count = 0
    for index, row in enumerate(rows):
        row_count += 1
        try:
            transactions.append(parse_row(row, index, options=opts))
        except RowError as err:
            logger.warning("Skipping %s", err)
            issues.append(err)

    logger.info(
        "Parsed %d transactions from %d rows (%d skipped)",
        len(transactions),
        row_count,
        len(issues),
    )
    return ParseOutcome(
        transactions=transactions,
        skipped=len(issues),
        row_count=row_count,
        issues=issues,
    )


def parse_file(data: bytes, filename: str, *, options: ParseOptions | None = None) -> ParseOutcome:
    """Read ``data`` as ``filename`` and parse it.

    Raises ``StructuralError`` when the file cannot be read and
    ``EmptyResultError`` when it yields no transaction at all.
    """

    outcome = parse_rows(read_rows(data, filename), options=options)
    if not outcome.transactions:
        raise EmptyResultError(row_count=outcome.row_count)
    return outcome


__all__ = ["ParseOptions", "ParseOutcome", "parse_row", "parse_rows", "parse_file"]
