"""Public orchestration entrypoints for the ``budget_ledger`` package.

- :func:`ingest_file`: parse and classify an uploaded statement (no writes).
- :func:`import_file`: ingest, classify and store one statement for a user.
- :func:`report_for_user`: build the report for a user's stored ledger.

Hosts (a web handler, the CLI) call these with raw bytes and an opaque user
id; authentication and file upload mechanics stay with the host.
"""

from __future__ import annotations

from datetime import date

from .classify import Classifier
from .config import LedgerSettings, load_settings
from .ingest.rows import ParseOptions, parse_file
from .logging_setup import get_logger
from .models import ImportResult, Report

logger = get_logger(__name__)

# DB imports stay inside functions so parsing/classification can be used
# without a configured database.


def ingest_file(
    data: bytes,
    filename: str,
    *,
    user_id: str,
    classifier: Classifier,
    options: ParseOptions | None = None,
) -> ImportResult:
    """Parse ``data`` and classify every resulting transaction.

    Raises ``StructuralError`` / ``EmptyResultError`` from the parser; per-row
    problems only show up in ``ImportResult.skipped``.
    """

    outcome = parse_file(data, filename, options=options)
    transactions = classifier.classify_transactions(outcome.transactions, user_id)
    categorized = sum(1 for tx in transactions if tx.category_id is not None)
    logger.info(
        "%s: %d transactions, %d categorized, %d rows skipped",
        filename,
        len(transactions),
        categorized,
        outcome.skipped,
    )
    return ImportResult(transactions=transactions, categorized=categorized, skipped=outcome.skipped)


def import_file(
    data: bytes,
    filename: str,
    *,
    user_id: str,
    bank_id: str | None = None,
    database_url: str | None = None,
    settings: LedgerSettings | None = None,
    today: date | None = None,
) -> ImportResult:
    """Ingest ``data`` and store the batch for ``user_id`` in one transaction.

    The user's system categories are created first when missing, so rule
    matches always resolve to a category row. Either every parsed transaction
    is written or, if anything fails, none is (seeded categories included).
    """

    from db.client import session_scope

    from .persistence import persist_transactions
    from .stores import SqlCategoryStore, SqlKeywordStore, seed_system_categories

    s = settings or load_settings()
    options = ParseOptions.from_settings(s, today=today)
    with session_scope(database_url=database_url or s.database_url) as session:
        seed_system_categories(session, user_id=user_id)
        classifier = Classifier(SqlKeywordStore(session), SqlCategoryStore(session))
        result = ingest_file(data, filename, user_id=user_id, classifier=classifier, options=options)
        persist_transactions(session, user_id=user_id, bank_id=bank_id, transactions=result.transactions)
    return result


def report_for_user(
    user_id: str,
    *,
    period: str = "all",
    database_url: str | None = None,
    today: date | None = None,
) -> Report:
    from db.client import session_scope

    from .persistence import load_ledger_entries
    from .reports import build_report

    with session_scope(database_url=database_url or load_settings().database_url) as session:
        entries = load_ledger_entries(session, user_id=user_id)
    return build_report(entries, period=period, today=today)


__all__ = ["ingest_file", "import_file", "report_for_user"]
