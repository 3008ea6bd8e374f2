"""Column detection for heterogeneous bank exports.

Bank statements arrive with headers in Romanian, English, or Russian, with or
without diacritics (XLSX exports of Romanian files often turn "Ă" into "Ä"),
and with either a signed amount column or separate Debit/Credit columns. This
module picks, per row, the raw value that represents each canonical field.

Header names are data, not code: :class:`HeaderTables` holds the recognized
substrings per field and can be loaded from JSON with
:func:`load_header_tables`. Matching is case-insensitive on the trimmed header
and substring based; within a field, the first header (in column order) that
contains any recognized substring wins.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from decimal import Decimal
from os import PathLike
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from ..models import RawRow

# ---------------------------------------------------------------------------
# Recognized header names
# ---------------------------------------------------------------------------


class HeaderTables(BaseModel):
    """Recognized header substrings per canonical field."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    date: tuple[str, ...]
    description: tuple[str, ...]
    amount: tuple[str, ...]
    currency: tuple[str, ...]
    debit: tuple[str, ...] = ("debit",)
    credit: tuple[str, ...] = ("credit",)
    kind: tuple[str, ...] = ()

    @field_validator("*")
    @classmethod
    def _lowercase(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(s.strip().lower() for s in v if s.strip())


DEFAULT_HEADER_TABLES = HeaderTables(
    date=(
        # Revolut: "Completed Date"; Revolut RO: "Data de început"
        "completed",
        "data",
        "date",
        "început",
        "inceput",
        "änceput",
        "start",
        "data operatiunii",
        "data tranzactiei",
        "дата",
        "дата начала",
        "дата выполнения",
    ),
    description=(
        "descriere",
        "description",
        "detalii",
        "details",
        "beneficiar",
        "описание",
    ),
    amount=(
        "sumă",
        "sumä",
        "suma",
        "amount",
        "valoare",
        "value",
        "total",
        "сумма",
    ),
    currency=(
        "moneda",
        "currency",
        "valuta",
        "валюта",
    ),
    debit=("debit",),
    credit=("credit",),
    kind=(
        "transaction type",
        "tip tranzactie",
        "tip operatiune",
        "dr/cr",
    ),
)


def load_header_tables(path: str | PathLike[str]) -> HeaderTables:
    """Load header tables from a JSON object keyed by field name.

    Fields missing from the file keep the built-in lists, so a file may
    extend a single field (e.g. add a new bank's amount header).
    """

    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError("header tables JSON must be an object keyed by field name")
    merged = DEFAULT_HEADER_TABLES.model_dump()
    merged.update(data)
    return HeaderTables.model_validate(merged)


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------

# DD.MM.YYYY, DD/MM/YY, ... or ISO date with an optional time part
_DATE_SHAPE_RE = re.compile(
    r"^\d{1,2}[./-]\d{1,2}[./-]\d{2,4}$|^\d{4}-\d{2}-\d{2}([ T]\d{2}:\d{2}(:\d{2})?)?$"
)


@dataclass(frozen=True, slots=True)
class DetectedColumns:
    """Raw values picked for each canonical field (``None`` when absent)."""

    date: Any = None
    description: Any = None
    amount: Any = None
    currency: Any = None
    kind: Any = None


def looks_like_date(value: Any) -> bool:
    return isinstance(value, str) and bool(_DATE_SHAPE_RE.match(value.strip()))


def _normalize_header(key: Any) -> str:
    return str(key).strip().lower()


def _find_by_header(row: RawRow, names: tuple[str, ...]) -> tuple[bool, Any]:
    if not names:
        return False, None
    for key in row.keys():
        if key is None:
            continue
        header = _normalize_header(key)
        if any(name in header for name in names):
            return True, row[key]
    return False, None


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float, Decimal)):
        # In a Debit/Credit layout the unused side is often 0 rather than empty.
        return value == 0
    return False


def _negate(value: Any) -> Any:
    """Return ``value`` as an outflow, keeping its raw type."""

    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return -abs(value)
    s = str(value).strip()
    return "-" + s.lstrip("+-").strip()


def detect_date(row: RawRow, tables: HeaderTables = DEFAULT_HEADER_TABLES) -> Any:
    found, value = _find_by_header(row, tables.date)
    if found:
        return value
    for value in row.values():
        if looks_like_date(value):
            return value
    return None


def detect_description(row: RawRow, tables: HeaderTables = DEFAULT_HEADER_TABLES) -> Any:
    return _find_by_header(row, tables.description)[1]


def detect_amount(row: RawRow, tables: HeaderTables = DEFAULT_HEADER_TABLES) -> Any:
    found, value = _find_by_header(row, tables.amount)
    if found:
        return value

    # Split layout (e.g. ING): separate Debit and Credit columns.
    _, debit = _find_by_header(row, tables.debit)
    _, credit = _find_by_header(row, tables.credit)
    if not _is_blank(debit):
        return _negate(debit)
    if not _is_blank(credit):
        return credit
    return None


def detect_currency(row: RawRow, tables: HeaderTables = DEFAULT_HEADER_TABLES) -> Any:
    return _find_by_header(row, tables.currency)[1]


def detect_kind(row: RawRow, tables: HeaderTables = DEFAULT_HEADER_TABLES) -> Any:
    return _find_by_header(row, tables.kind)[1]


def detect_columns(row: RawRow, tables: HeaderTables = DEFAULT_HEADER_TABLES) -> DetectedColumns:
    """Pick the raw value for every canonical field of ``row``.

    Never raises on odd headers or values; absence is reported as ``None``.
    """

    return DetectedColumns(
        date=detect_date(row, tables),
        description=detect_description(row, tables),
        amount=detect_amount(row, tables),
        currency=detect_currency(row, tables),
        kind=detect_kind(row, tables),
    )


__all__ = [
    "HeaderTables",
    "DEFAULT_HEADER_TABLES",
    "DetectedColumns",
    "load_header_tables",
    "looks_like_date",
    "detect_date",
    "detect_description",
    "detect_amount",
    "detect_currency",
    "detect_kind",
    "detect_columns",
]
