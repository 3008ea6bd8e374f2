"""Pytest configuration for test isolation.

The package reads ``DATABASE_URL`` and ``LEDGER_*`` variables from the
environment (and the CLI additionally loads a ``.env`` from the working
directory). Tests must not depend on whatever the developer has exported, so
an autouse fixture clears those variables and runs each test from its own
temporary directory. Logging handlers installed by CLI tests and cached
SQLAlchemy engines are torn down after every test.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from db.client import dispose_engines

from budget_ledger import logging_setup
from tests.helpers.db import bootstrap_sqlite_db

_ENV_VARS = (
    "DATABASE_URL",
    "LEDGER_DEFAULT_CURRENCY",
    "LEDGER_STRICT_DATES",
    "LEDGER_HEADER_TABLES",
    "LEDGER_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    saved = dict(os.environ)
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    work = tmp_path / "cwd"
    work.mkdir()
    monkeypatch.chdir(work)
    yield
    # load_dotenv writes straight into os.environ
    os.environ.clear()
    os.environ.update(saved)
    pkg_logger = logging.getLogger("budget_ledger")
    for h in list(pkg_logger.handlers):
        pkg_logger.removeHandler(h)
    pkg_logger.propagate = True
    pkg_logger.setLevel(logging.NOTSET)
    logging_setup._handler = None
    dispose_engines()


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    """URL of a fresh file-backed SQLite database with the ledger schema."""

    return bootstrap_sqlite_db(tmp_path / "ledger.sqlite3")
