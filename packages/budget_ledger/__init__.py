"""budget_ledger: bank-statement ingestion, categorization and spending reports.

Public API:
- ``ingest_file`` / ``import_file`` / ``report_for_user`` (orchestration)
- ``parse_rows`` / ``parse_file`` (row parsing)
- ``classify`` / ``Classifier`` / ``suggest_keyword`` (categorization)
- ``aggregate`` / ``build_report`` (reporting)
"""

from __future__ import annotations

from .api import import_file, ingest_file, report_for_user
from .classify import Classifier, classify, suggest_keyword
from .errors import EmptyResultError, LedgerError, RowError, StructuralError
from .ingest import ParseOptions, ParseOutcome, parse_file, parse_rows
from .models import CanonicalTransaction, ImportResult, LedgerEntry, PivotReport, Report, UserKeyword
from .pivot import aggregate
from .reports import build_report
from .rules import CATEGORY_RULES, CategoryRule

__all__ = [
    "CATEGORY_RULES",
    "CanonicalTransaction",
    "CategoryRule",
    "Classifier",
    "EmptyResultError",
    "ImportResult",
    "LedgerEntry",
    "LedgerError",
    "ParseOptions",
    "ParseOutcome",
    "PivotReport",
    "Report",
    "RowError",
    "StructuralError",
    "UserKeyword",
    "aggregate",
    "build_report",
    "classify",
    "import_file",
    "ingest_file",
    "parse_file",
    "parse_rows",
    "report_for_user",
    "suggest_keyword",
]
