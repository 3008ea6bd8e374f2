import json
from decimal import Decimal
from pathlib import Path

import pytest
from db.client import session_scope
from db.models.ledger import LgTransaction, LgUserKeyword
from sqlalchemy import select
from typer.testing import CliRunner

from budget_ledger.cli import app

runner = CliRunner()

CSV = (
    "Data,Descriere,Suma,Moneda\n"
    "01.12.2025,KAUFLAND BUCURESTI,\"-45,50\",RON\n"
    "02.12.2025,Salariu,5000.00,RON\n"
    "03.12.2025,COFIDIS SPAIN,-120.00,EUR\n"
    "05.12.2025,Bolt,-12.00,RON\n"
    "06.12.2025,,-1.00,RON\n"
)


@pytest.fixture
def statement(tmp_path: Path) -> Path:
    path = tmp_path / "extras.csv"
    path.write_text(CSV, encoding="utf-8")
    return path


def _quiet(*args: str) -> list[str]:
    return ["--log-level", "ERROR", *args]


def test_import_dry_run_needs_no_database(statement):
    result = runner.invoke(app, ["import-file", "--file", str(statement), "--user-id", "u1", "--dry-run"])
    assert result.exit_code == 0, result.output
    assert "KAUFLAND BUCURESTI" in result.output
    assert "Cumpărături" in result.output
    assert "4 transactions, 3 categorized, 1 rows skipped" in result.output


def test_import_missing_file():
    result = runner.invoke(app, ["import-file", "--file", "nope.csv", "--user-id", "u1", "--dry-run"])
    assert result.exit_code == 1
    assert "Error: File not found" in result.output


def test_import_unsupported_format(tmp_path):
    pdf = tmp_path / "extras.pdf"
    pdf.write_bytes(b"%PDF-1.4")
    result = runner.invoke(app, ["import-file", "--file", str(pdf), "--user-id", "u1", "--dry-run"])
    assert result.exit_code == 1
    assert "Error: Failed to read extras.pdf" in result.output


def test_import_without_any_valid_row(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("a,b\n1,2\n", encoding="utf-8")
    result = runner.invoke(app, ["import-file", "--file", str(path), "--user-id", "u1", "--dry-run"])
    assert result.exit_code == 1
    assert "no transactions found" in result.output


def test_database_required_without_url(statement):
    result = runner.invoke(app, ["import-file", "--file", str(statement), "--user-id", "u1"])
    assert result.exit_code == 1
    assert "DATABASE_URL is not set" in result.output


def test_seed_bank_import_and_report(db_url, statement):
    result = runner.invoke(app, _quiet("seed-categories", "--user-id", "u1", "--database-url", db_url))
    assert result.exit_code == 0, result.output
    assert "Created 12 categories for u1" in result.output

    result = runner.invoke(app, _quiet("add-bank", "--user-id", "u1", "--name", "ING", "--database-url", db_url))
    assert result.exit_code == 0, result.output
    bank_id = result.output.strip()
    assert len(bank_id) == 32

    result = runner.invoke(
        app,
        _quiet(
            "import-file",
            "--file",
            str(statement),
            "--user-id",
            "u1",
            "--bank-id",
            bank_id,
            "--database-url",
            db_url,
        ),
    )
    assert result.exit_code == 0, result.output
    assert "4 transactions, 3 categorized, 1 rows skipped" in result.output
    with session_scope(database_url=db_url) as s:
        rows = s.scalars(select(LgTransaction)).all()
        assert len(rows) == 4
        assert {r.bank_id for r in rows} == {bank_id}

    result = runner.invoke(app, _quiet("report", "--user-id", "u1", "--database-url", db_url))
    assert result.exit_code == 0, result.output
    assert "Period: all" in result.output
    assert "Necategorizat" in result.output
    assert "2025-12" in result.output
    assert "All-time balance: 4822.50" in result.output
    assert "Transactions: 4" in result.output

    result = runner.invoke(app, _quiet("report", "--user-id", "u1", "--json", "--database-url", db_url))
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert Decimal(payload["summary"]["total_expenses"]) == Decimal("177.50")
    assert Decimal(payload["summary"]["total_income"]) == Decimal("5000.00")
    assert payload["pivot"]["months"] == ["2025-12"]
    assert payload["stats"]["transaction_count"] == 4
    assert [m["month"] for m in payload["by_month"]] == ["2025-12"]


def test_import_unknown_bank_fails_cleanly(db_url, statement):
    args = ["import-file", "--file", str(statement), "--user-id", "u1", "--bank-id", "x", "--database-url", db_url]
    result = runner.invoke(app, _quiet(*args))
    assert result.exit_code == 1
    assert "unknown bank" in result.output
    with session_scope(database_url=db_url) as s:
        assert s.scalars(select(LgTransaction)).all() == []


def test_report_unknown_period(db_url):
    result = runner.invoke(app, ["report", "--user-id", "u1", "--period", "forever", "--database-url", db_url])
    assert result.exit_code == 1
    assert "Unknown period 'forever'" in result.output


def test_report_for_empty_ledger(db_url):
    result = runner.invoke(app, _quiet("report", "--user-id", "u1", "--database-url", db_url))
    assert result.exit_code == 0, result.output
    assert "No expenses in this period." in result.output


@pytest.mark.parametrize(
    "args",
    [
        ["report", "--user-id", "u1"],
        ["seed-categories", "--user-id", "u1"],
        ["add-bank", "--user-id", "u1", "--name", "ING"],
    ],
)
def test_invalid_settings_are_reported(monkeypatch, db_url, args):
    monkeypatch.setenv("DATABASE_URL", db_url)
    monkeypatch.setenv("LEDGER_DEFAULT_CURRENCY", "EURO")
    result = runner.invoke(app, _quiet(*args))
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "default_currency" in result.output


def test_missing_header_tables_file_is_reported(monkeypatch, statement):
    monkeypatch.setenv("LEDGER_HEADER_TABLES", "missing-headers.json")
    result = runner.invoke(app, ["import-file", "--file", str(statement), "--user-id", "u1", "--dry-run"])
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "missing-headers.json" in result.output


def test_database_url_from_dotenv(db_url):
    Path(".env").write_text(f"DATABASE_URL={db_url}\n", encoding="utf-8")
    result = runner.invoke(app, _quiet("seed-categories", "--user-id", "u1"))
    assert result.exit_code == 0, result.output
    assert "Created 12 categories for u1" in result.output


# ---- suggest-keyword ------------------------------------------------------------


def test_suggest_keyword_prints_suggestion():
    result = runner.invoke(app, ["suggest-keyword", "--description", "COFIDIS SPAIN"])
    assert result.exit_code == 0
    assert result.output.strip() == "cofidis"


def test_suggest_keyword_nothing_usable():
    result = runner.invoke(app, ["suggest-keyword", "--description", "12 34"])
    assert result.exit_code == 1
    assert "Error: No keyword could be derived" in result.output


def test_suggest_keyword_save_requires_user_and_category():
    result = runner.invoke(app, ["suggest-keyword", "--description", "COFIDIS SPAIN", "--save"])
    assert result.exit_code == 1
    assert "--save requires --user-id and --category" in result.output


def _seed(db_url: str) -> None:
    result = runner.invoke(app, _quiet("seed-categories", "--user-id", "u1", "--database-url", db_url))
    assert result.exit_code == 0, result.output


def _keywords(db_url: str) -> list[str]:
    with session_scope(database_url=db_url) as s:
        return list(s.scalars(select(LgUserKeyword.keyword)))


def test_suggest_keyword_save_with_yes(db_url):
    _seed(db_url)
    args = ["suggest-keyword", "--description", "COFIDIS SPAIN", "--user-id", "u1"]
    result = runner.invoke(app, _quiet(*args, "--category", "transferuri", "--save", "--yes", "--database-url", db_url))
    assert result.exit_code == 0, result.output
    assert "Saved 'cofidis' -> transferuri" in result.output
    assert _keywords(db_url) == ["cofidis"]


def test_suggest_keyword_save_declined(db_url):
    _seed(db_url)
    args = ["suggest-keyword", "--description", "COFIDIS SPAIN", "--user-id", "u1", "--category", "Transferuri"]
    result = runner.invoke(app, _quiet(*args, "--save", "--database-url", db_url), input="n\n")
    assert result.exit_code == 0, result.output
    assert "Not saved." in result.output
    assert _keywords(db_url) == []


def test_suggest_keyword_unknown_category(db_url):
    _seed(db_url)
    args = ["suggest-keyword", "--description", "COFIDIS SPAIN", "--user-id", "u1", "--category", "Pets"]
    result = runner.invoke(app, _quiet(*args, "--save", "--yes", "--database-url", db_url))
    assert result.exit_code == 1
    assert "Unknown category 'Pets'" in result.output
