"""Runtime settings for ``budget_ledger``.

Settings are read from the process environment (the CLI loads a local ``.env``
first via ``python-dotenv``). Library entrypoints accept an explicit
``LedgerSettings`` so hosts can configure the pipeline without touching the
environment.

Variables
---------
- ``DATABASE_URL``: SQLAlchemy URL for persistence.
- ``LEDGER_DEFAULT_CURRENCY``: currency for rows without a currency column
  (default ``RON``).
- ``LEDGER_STRICT_DATES``: when truthy, rows whose date cannot be read are
  rejected instead of being imported with today's date and flagged for review.
- ``LEDGER_HEADER_TABLES``: path to a JSON file overriding the recognized
  column header names.
- ``LEDGER_LOG_LEVEL``: log level for the CLI.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def _env_flag(raw: str | None, *, default: bool = False) -> bool:
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in _TRUTHY:
        return True
    if v in _FALSY:
        return False
    raise ValueError(f"invalid boolean value: {raw!r}")


class LedgerSettings(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    database_url: str | None = None
    default_currency: str = "RON"
    strict_dates: bool = False
    header_tables_path: Path | None = None
    log_level: str | None = None

    @field_validator("default_currency")
    @classmethod
    def _currency_code(cls, v: str) -> str:
        code = v.upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError("default_currency must be a 3-letter code")
        return code


def load_settings(env: Mapping[str, str] | None = None) -> LedgerSettings:
    """Build settings from ``env`` (defaults to ``os.environ``)."""

    e = os.environ if env is None else env
    header_path = (e.get("LEDGER_HEADER_TABLES") or "").strip()
    return LedgerSettings(
        database_url=e.get("DATABASE_URL") or None,
        default_currency=e.get("LEDGER_DEFAULT_CURRENCY") or "RON",
        strict_dates=_env_flag(e.get("LEDGER_STRICT_DATES")),
        header_tables_path=Path(header_path) if header_path else None,
        log_level=e.get("LEDGER_LOG_LEVEL") or None,
    )


__all__ = ["LedgerSettings", "load_settings"]
