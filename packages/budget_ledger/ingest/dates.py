"""Date token normalization to ``YYYY-MM-DD``.

Resolution order (first match wins):

1. Spreadsheet serial number (int/float or numeric string strictly between
   40000 and 60000): days since 1899-12-30, time of day dropped. The epoch sits
   two days before 1900-01-01 to absorb the 1900 leap-year defect of the format.
2. ISO date, optionally followed by a time part (``2025-12-02 08:57:52``,
   ``2025-12-02T08:57``): the date prefix is kept verbatim.
3. ``DD MMM YYYY`` with an English month abbreviation (Revolut: ``01 Dec 2024``).
4. Three parts split on ``.``, ``/`` or ``-`` read as day, month, year
   (``01.12.2025``, ``1/2/25``); two-digit years are taken as 20YY.

:func:`parse_date` returns ``None`` when nothing applies or the result is not
a real calendar date. :func:`normalize_date` never fails: it falls back to
today's date so one bad token cannot block an import, and reports the
fallback so callers can flag or reject such rows.
"""

from __future__ import annotations

import re
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any

SERIAL_EPOCH = date(1899, 12, 30)
SERIAL_MIN = 40000
SERIAL_MAX = 60000

_MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

_ISO_PREFIX_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:$|[ T])")
_DAY_MON_YEAR_RE = re.compile(r"^(\d{1,2})\s+([A-Za-z]{3})\s+(\d{4})$")
_PARTS_SPLIT_RE = re.compile(r"[./-]")


def _iso(year: int, month: int, day: int) -> str | None:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def _serial_value(value: Any) -> Decimal | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        raw = str(value)
    elif isinstance(value, str):
        raw = value.strip()
    else:
        return None
    try:
        d = Decimal(raw)
    except (InvalidOperation, ValueError):
        return None
    if not d.is_finite():
        return None
    return d


def serial_to_iso(serial: int | float | Decimal) -> str:
    """Convert a spreadsheet day serial to ``YYYY-MM-DD`` (fractional part dropped)."""

    return (SERIAL_EPOCH + timedelta(days=int(serial))).isoformat()


def parse_date(value: Any) -> str | None:
    """Return ``value`` as ``YYYY-MM-DD`` or ``None`` when it cannot be read."""

    serial = _serial_value(value)
    if serial is not None and SERIAL_MIN < serial < SERIAL_MAX:
        return serial_to_iso(serial)

    # Any other number (or non-string) is not a date token.
    if not isinstance(value, str):
        return None

    s = value.strip()
    if not s:
        return None

    m = _ISO_PREFIX_RE.match(s)
    if m:
        if _iso(int(m.group(1)), int(m.group(2)), int(m.group(3))) is None:
            return None
        return s[:10]

    m = _DAY_MON_YEAR_RE.match(s)
    if m:
        month = _MONTHS.get(m.group(2).lower())
        if month is not None:
            return _iso(int(m.group(3)), month, int(m.group(1)))

    parts = _PARTS_SPLIT_RE.split(s)
    if len(parts) == 3 and all(p.isdigit() for p in parts):
        day, month, year = parts
        if len(year) == 2:
            year = f"20{year}"
        elif len(year) != 4:
            return None
        return _iso(int(year), int(month), int(day))

    return None


def normalize_date(value: Any, *, today: date | None = None) -> tuple[str, bool]:
    """Like :func:`parse_date` but falls back to ``today`` instead of failing.

    Returns ``(iso_date, fell_back)``.
    """

    parsed = parse_date(value)
    if parsed is not None:
        return parsed, False
    return (today or date.today()).isoformat(), True


__all__ = ["parse_date", "normalize_date", "serial_to_iso"]
