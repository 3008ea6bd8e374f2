from datetime import date
from decimal import Decimal

import pytest
from db.client import session_scope
from db.models.ledger import LgBank, LgCategory, LgTransaction, LgUserKeyword
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from budget_ledger.api import import_file, report_for_user
from budget_ledger.config import LedgerSettings
from budget_ledger.errors import EmptyResultError, StructuralError
from budget_ledger.persistence import load_ledger_entries
from budget_ledger.stores import SqlCategoryStore, SqlKeywordStore, save_user_keyword, seed_system_categories
from tests.helpers.db import add_bank, add_category

USER = "user-1"
CSV = (
    "Data,Descriere,Suma,Moneda\n"
    "01.12.2025,KAUFLAND BUCURESTI,\"-45,50\",RON\n"
    "02.12.2025,Salariu,5000.00,RON\n"
    "03.12.2025,COFIDIS SPAIN,-120.00,EUR\n"
    "ieri,Bolt,-12.00,RON\n"
    "04.12.2025,,-1.00,RON\n"
).encode()


def _seed(db_url: str, user_id: str = USER) -> dict[str, str]:
    with session_scope(database_url=db_url) as s:
        seed_system_categories(s, user_id=user_id)
        rows = s.execute(select(LgCategory.name, LgCategory.id).where(LgCategory.user_id == user_id))
        return {name: cid for name, cid in rows}


def _count(db_url: str, model) -> int:
    with session_scope(database_url=db_url) as s:
        return s.scalar(select(func.count()).select_from(model))


# ---- seeding / keywords ----------------------------------------------------------


def test_seed_system_categories_is_idempotent(db_url):
    ids = _seed(db_url)
    assert len(ids) == 12
    with session_scope(database_url=db_url) as s:
        assert seed_system_categories(s, user_id=USER) == []
        income = s.scalar(select(LgCategory).where(LgCategory.name == "Venituri"))
        assert income.type == "income"
        assert income.is_system_category is True
        assert income.icon == "💰"
        cash = s.scalar(select(LgCategory).where(LgCategory.name == "Cash"))
        assert cash.type == "expense"
    assert _count(db_url, LgCategory) == 12


def test_seed_keeps_existing_user_categories(db_url):
    add_category(db_url, user_id=USER, name="cash", icon="💶")
    ids = _seed(db_url)
    assert len(ids) == 12
    assert "Cash" not in ids and "cash" in ids


def test_save_user_keyword_normalizes_and_updates(db_url):
    ids = _seed(db_url)
    with session_scope(database_url=db_url) as s:
        row = save_user_keyword(s, user_id=USER, keyword="  COFIDIS   Spain ", category_id=ids["Cumpărături"])
        assert row.keyword == "cofidis spain"
        save_user_keyword(s, user_id=USER, keyword="cofidis spain", category_id=ids["Transferuri"])
    with session_scope(database_url=db_url) as s:
        rows = s.scalars(select(LgUserKeyword)).all()
        assert len(rows) == 1
        assert rows[0].category_id == ids["Transferuri"]


def test_save_user_keyword_rejects_foreign_category_and_blank_keyword(db_url):
    other = _seed(db_url, user_id="someone-else")
    with session_scope(database_url=db_url) as s:
        with pytest.raises(ValueError):
            save_user_keyword(s, user_id=USER, keyword="x", category_id=other["Cash"])
        with pytest.raises(ValueError):
            save_user_keyword(s, user_id="someone-else", keyword="   ", category_id=other["Cash"])


def test_user_keyword_is_unique_per_user(db_url):
    ids = _seed(db_url)
    other = _seed(db_url, user_id="someone-else")
    with pytest.raises(IntegrityError):
        with session_scope(database_url=db_url) as s:
            s.add(LgUserKeyword(user_id=USER, keyword="lidl", category_id=ids["Cash"]))
            s.add(LgUserKeyword(user_id=USER, keyword="lidl", category_id=ids["Transferuri"]))
            s.flush()
    with session_scope(database_url=db_url) as s:
        s.add(LgUserKeyword(user_id=USER, keyword="lidl", category_id=ids["Cash"]))
        s.add(LgUserKeyword(user_id="someone-else", keyword="lidl", category_id=other["Cash"]))
    assert _count(db_url, LgUserKeyword) == 2


def test_sql_stores(db_url):
    ids = _seed(db_url)
    with session_scope(database_url=db_url) as s:
        save_user_keyword(s, user_id=USER, keyword="cofidis", category_id=ids["Cumpărături"])
    with session_scope(database_url=db_url) as s:
        kws = SqlKeywordStore(s).list_keywords(USER)
        assert [(k.keyword, k.category_id) for k in kws] == [("cofidis", ids["Cumpărături"])]
        assert SqlKeywordStore(s).list_keywords("nobody") == []
        cats = SqlCategoryStore(s)
        assert cats.resolve_category_id(USER, "CUMPĂRĂTURI") == ids["Cumpărături"]
        assert cats.resolve_category_id(USER, "Nope") is None
        assert cats.category_name(USER, ids["Cash"]) == "Cash"
        assert [r.category_name for r in cats.list_category_rules_in_order()][0] == "Transport"


# ---- import ---------------------------------------------------------------------


def test_import_file_persists_classified_batch(db_url):
    ids = _seed(db_url)
    bank_id = add_bank(db_url, user_id=USER)
    with session_scope(database_url=db_url) as s:
        save_user_keyword(s, user_id=USER, keyword="cofidis", category_id=ids["Transferuri"])

    result = import_file(
        CSV,
        "extras.csv",
        user_id=USER,
        bank_id=bank_id,
        database_url=db_url,
        settings=LedgerSettings(),
        today=date(2026, 1, 15),
    )
    assert len(result.transactions) == 4
    assert result.skipped == 1
    assert result.categorized == 4

    with session_scope(database_url=db_url) as s:
        rows = s.scalars(select(LgTransaction).order_by(LgTransaction.date, LgTransaction.description)).all()
        by_desc = {r.description: r for r in rows}
        shop = by_desc["KAUFLAND BUCURESTI"]
        assert shop.amount == Decimal("-45.50")
        assert shop.date == date(2025, 12, 1)
        assert shop.category_id == ids["Cumpărături"]
        assert shop.category_source == "rule"
        assert shop.bank_id == bank_id
        assert shop.raw_record == {
            "Data": "01.12.2025",
            "Descriere": "KAUFLAND BUCURESTI",
            "Suma": "-45,50",
            "Moneda": "RON",
        }
        loan = by_desc["COFIDIS SPAIN"]
        assert loan.category_source == "user"
        assert loan.category_id == ids["Transferuri"]
        assert loan.currency == "EUR"
        bolt = by_desc["Bolt"]
        assert bolt.needs_review is True
        assert bolt.date == date(2026, 1, 15)
        assert by_desc["Salariu"].category_id == ids["Venituri"]


def test_uncategorized_rows_are_stored_with_unknown_source(db_url):
    data = b"Date,Description,Amount\n2025-01-01,Zzz,-3\n"
    import_file(data, "x.csv", user_id=USER, database_url=db_url, settings=LedgerSettings())
    with session_scope(database_url=db_url) as s:
        (tx,) = s.scalars(select(LgTransaction)).all()
        assert tx.category_id is None
        assert tx.category_source == "unknown"
        assert tx.bank_id is None


def test_import_seeds_categories_for_new_user(db_url):
    data = b"Date,Description,Amount\n2025-01-01,Lidl,-3\n"
    result = import_file(data, "x.csv", user_id=USER, database_url=db_url, settings=LedgerSettings())
    assert result.categorized == 1
    assert _count(db_url, LgCategory) == 12
    ids = _seed(db_url)
    assert result.transactions[0].category_id == ids["Cumpărături"]
    with session_scope(database_url=db_url) as s:
        (tx,) = s.scalars(select(LgTransaction)).all()
        assert tx.category_source == "rule"
        assert tx.category_id == ids["Cumpărături"]


def test_failed_import_rolls_back_seeded_categories(db_url):
    with pytest.raises(ValueError):
        import_file(CSV, "extras.csv", user_id=USER, bank_id="missing", database_url=db_url, settings=LedgerSettings())
    assert _count(db_url, LgCategory) == 0


def test_import_is_all_or_nothing(db_url):
    _seed(db_url)
    with pytest.raises(ValueError):
        import_file(CSV, "extras.csv", user_id=USER, bank_id="missing", database_url=db_url, settings=LedgerSettings())
    assert _count(db_url, LgTransaction) == 0


def test_import_errors_write_nothing(db_url):
    with pytest.raises(StructuralError):
        import_file(b"%PDF", "x.pdf", user_id=USER, database_url=db_url, settings=LedgerSettings())
    with pytest.raises(EmptyResultError):
        import_file(b"a,b\n1,2\n", "x.csv", user_id=USER, database_url=db_url, settings=LedgerSettings())
    assert _count(db_url, LgTransaction) == 0


def test_strict_dates_setting_rejects_rows(db_url):
    settings = LedgerSettings(strict_dates=True)
    result = import_file(CSV, "extras.csv", user_id=USER, database_url=db_url, settings=settings)
    assert result.skipped == 2
    assert _count(db_url, LgTransaction) == 3


def test_reimporting_the_same_file_duplicates_rows(db_url):
    # Known limitation: there is no duplicate-transaction detection.
    _seed(db_url)
    for _ in range(2):
        import_file(CSV, "extras.csv", user_id=USER, database_url=db_url, settings=LedgerSettings())
    assert _count(db_url, LgTransaction) == 8
    report = report_for_user(USER, database_url=db_url, period="all")
    assert report.summary.total_income == Decimal("10000.00")


# ---- referential behavior --------------------------------------------------------


def test_deleting_category_nulls_transactions_and_drops_keywords(db_url):
    ids = _seed(db_url)
    with session_scope(database_url=db_url) as s:
        save_user_keyword(s, user_id=USER, keyword="kaufland", category_id=ids["Cumpărături"])
    import_file(CSV, "extras.csv", user_id=USER, database_url=db_url, settings=LedgerSettings())

    with session_scope(database_url=db_url) as s:
        s.delete(s.get(LgCategory, ids["Cumpărături"]))

    with session_scope(database_url=db_url) as s:
        shop = s.scalar(select(LgTransaction).where(LgTransaction.description == "KAUFLAND BUCURESTI"))
        assert shop is not None
        assert shop.category_id is None
        assert s.scalars(select(LgUserKeyword)).all() == []


def test_deleting_bank_keeps_transactions(db_url):
    bank_id = add_bank(db_url, user_id=USER)
    import_file(CSV, "extras.csv", user_id=USER, bank_id=bank_id, database_url=db_url, settings=LedgerSettings())
    with session_scope(database_url=db_url) as s:
        s.delete(s.get(LgBank, bank_id))
    with session_scope(database_url=db_url) as s:
        rows = s.scalars(select(LgTransaction)).all()
        assert len(rows) == 4
        assert all(r.bank_id is None for r in rows)


# ---- reports from the database ---------------------------------------------------


def test_load_ledger_entries_and_report(db_url):
    _seed(db_url)
    import_file(
        CSV, "extras.csv", user_id=USER, database_url=db_url, settings=LedgerSettings(), today=date(2026, 1, 15)
    )
    with session_scope(database_url=db_url) as s:
        entries = load_ledger_entries(s, user_id=USER)
        assert load_ledger_entries(s, user_id="nobody") == []
    assert [e.date for e in entries] == ["2025-12-01", "2025-12-02", "2025-12-03", "2026-01-15"]
    assert entries[0].category_name == "Cumpărături"
    assert entries[0].category_icon == "🛍️"

    report = report_for_user(USER, database_url=db_url, period="all", today=date(2026, 1, 20))
    assert report.pivot.months == ["2025-12", "2026-01"]
    names = [r.category_name for r in report.pivot.rows]
    # COFIDIS has no rule match: 120.00 uncategorized beats 45.50 and 12.00
    assert names == ["Necategorizat", "Cumpărături", "Transport"]
    assert report.summary.total_expenses == Decimal("177.50")
    assert report.summary.total_income == Decimal("5000.00")
