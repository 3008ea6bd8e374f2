"""Exception types raised by the import pipeline.

Only two of them ever reach a caller: ``StructuralError`` (the file itself is
unusable) and ``EmptyResultError`` (the file was read but no row produced a
transaction). ``RowError`` is raised and caught inside the row loop; a missing
category is never an error.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for domain errors raised by ``budget_ledger``."""


class StructuralError(LedgerError):
    """Unreadable, empty, or unsupported-format input; fatal to the whole import."""


class EmptyResultError(LedgerError):
    """Parsing finished but produced zero usable transactions."""

    def __init__(self, message: str = "no transactions found", *, row_count: int = 0) -> None:
        super().__init__(message)
        self.row_count = row_count


class RowError(LedgerError):
    """A single row could not be turned into a transaction; the batch continues."""

    def __init__(self, index: int, reason: str) -> None:
        super().__init__(f"row {index + 1}: {reason}")
        self.index = index
        self.reason = reason


__all__ = ["LedgerError", "StructuralError", "EmptyResultError", "RowError"]
