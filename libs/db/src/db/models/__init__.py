"""Shared SQLAlchemy models registry for the ledger database.

Currently includes the ledger domain models used by ``budget_ledger``.
"""

from .ledger import Base, LgBank, LgCategory, LgTransaction, LgUserKeyword

__all__ = [
    "Base",
    "LgBank",
    "LgCategory",
    "LgTransaction",
    "LgUserKeyword",
]
