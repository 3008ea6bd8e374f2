"""Amount parsing and sign normalization.

Canonical convention: negative = money out, positive = money in, two decimal
places (ROUND_HALF_UP). Sources express the sign three ways and all end up
here: an explicitly signed amount column, Debit/Credit columns (already turned
into a signed value by the column detector), or an unsigned amount plus a
transaction-kind flag.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

_CENTS = Decimal("0.01")

# Kind-flag values meaning "money out" (lowercased, trimmed).
EXPENSE_KINDS = frozenset(
    {
        "expense",
        "debit",
        "dr",
        "out",
        "cheltuiala",
        "cheltuială",
        "plata",
        "plată",
        "расход",
    }
)

_CURRENCY_SYMBOLS = "$€£¥₽₴"
# Leading/trailing currency codes or words: "RON 45,50", "45.50 lei", "12 EUR"
_CURRENCY_WORD_RE = re.compile(r"^[A-Za-z]{3}\s+|\s*(?:[A-Za-z]{3}|lei)$", re.IGNORECASE)
_GROUPING_SPACES_RE = re.compile(r"[\s  ']")


def _strip_markers(s: str) -> tuple[str, bool]:
    """Strip sign, currency, and accounting parentheses in any order."""

    negative = False
    while True:
        changed = False
        stripped = _CURRENCY_WORD_RE.sub("", s)
        if stripped != s:
            s = stripped.strip()
            changed = True
        if s.startswith("+"):
            s = s[1:].lstrip()
            changed = True
        elif s.startswith("-"):
            negative = not negative
            s = s[1:].lstrip()
            changed = True
        if s and s[0] in _CURRENCY_SYMBOLS:
            s = s[1:].lstrip()
            changed = True
        if s and s[-1] in _CURRENCY_SYMBOLS:
            s = s[:-1].rstrip()
            changed = True
        # "(45.50)" is an outflow regardless of any other sign marker
        if len(s) >= 2 and s.startswith("(") and s.endswith(")"):
            negative = True
            s = s[1:-1].strip()
            changed = True
        if s.endswith("-"):
            # trailing minus, as printed by some bank statements
            negative = not negative
            s = s[:-1].rstrip()
            changed = True
        if not changed:
            return s, negative


def _unify_separators(s: str) -> str:
    """Return ``s`` with a dot decimal separator and no grouping characters."""

    s = _GROUPING_SPACES_RE.sub("", s)
    has_dot = "." in s
    has_comma = "," in s
    if has_dot and has_comma:
        # Whichever separator comes last is the decimal one.
        if s.rfind(",") > s.rfind("."):
            return s.replace(".", "").replace(",", ".")
        return s.replace(",", "")
    if has_comma:
        head, _, tail = s.rpartition(",")
        if s.count(",") == 1 and len(tail) != 3:
            # "45,50" / "45,5": decimal comma
            return f"{head}.{tail}"
        # "1,234" / "1,234,567": grouping
        return s.replace(",", "")
    return s


def parse_amount(value: Any) -> Decimal:
    """Parse a raw amount cell into a ``Decimal`` (not yet quantized).

    Raises ``ValueError`` for blank or non-numeric input.
    """

    if value is None or isinstance(value, bool):
        raise ValueError("amount is required")
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, (int, float)):
        d = Decimal(str(value))
    else:
        raw = str(value).strip()
        if not raw:
            raise ValueError("amount is empty")
        s, negative = _strip_markers(raw)
        s = _unify_separators(s)
        try:
            d = Decimal(s)
        except InvalidOperation as exc:
            raise ValueError(f"invalid amount: {value!r}") from exc
        if negative:
            d = -d
    if not d.is_finite():
        raise ValueError(f"invalid amount: {value!r}")
    return d


def is_expense_kind(kind: Any) -> bool:
    return isinstance(kind, str) and kind.strip().lower() in EXPENSE_KINDS


def normalize_amount(value: Any, *, kind: Any = None) -> Decimal:
    """Return the canonical signed two-decimal amount for ``value``.

    A positive amount flagged as an expense by ``kind`` is negated; an already
    negative amount is left alone, so normalizing a canonical value is a no-op.
    """

    d = parse_amount(value).quantize(_CENTS, rounding=ROUND_HALF_UP)
    if d > 0 and is_expense_kind(kind):
        d = -d
    # Avoid "-0.00"
    return d if d != 0 else abs(d)


__all__ = [
    "EXPENSE_KINDS",
    "parse_amount",
    "is_expense_kind",
    "normalize_amount",
]
