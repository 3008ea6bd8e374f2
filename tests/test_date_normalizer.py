from datetime import date
from decimal import Decimal

import pytest

from budget_ledger.ingest.dates import normalize_date, parse_date, serial_to_iso


@pytest.mark.parametrize(
    "value, expected",
    [
        ("01.12.2025", "2025-12-01"),
        ("1/2/25", "2025-02-01"),
        ("15-11-2024", "2024-11-15"),
        ("2025-12-02 08:57:52", "2025-12-02"),
        ("2025-12-02T08:57", "2025-12-02"),
        ("2025-12-02", "2025-12-02"),
        ("01 Dec 2024", "2024-12-01"),
        ("1 dec 2024", "2024-12-01"),
        ("  01.12.2025  ", "2025-12-01"),
    ],
)
def test_text_formats(value, expected):
    assert parse_date(value) == expected


def test_spreadsheet_serial_number():
    # days since 1899-12-30
    assert parse_date(45200) == "2023-10-01"
    assert parse_date(45200.75) == "2023-10-01"
    assert parse_date("45200") == "2023-10-01"
    assert parse_date(Decimal("45627")) == "2024-12-01"
    assert serial_to_iso(45658) == "2025-01-01"


def test_serial_range_is_exclusive():
    assert parse_date(40000) is None
    assert parse_date(60000) is None
    assert parse_date(40001) == "2009-07-07"


def test_small_numbers_are_not_dates():
    assert parse_date(12) is None
    assert parse_date(-45200) is None


def test_booleans_are_not_serials():
    assert parse_date(True) is None


def test_invalid_calendar_dates_are_rejected():
    assert parse_date("31.02.2025") is None
    assert parse_date("2025-13-01") is None
    assert parse_date("32 Jan 2025") is None


def test_unknown_month_abbreviation():
    assert parse_date("01 Foo 2024") is None


def test_three_digit_year_is_rejected():
    assert parse_date("01.12.202") is None


def test_garbage_and_empty():
    assert parse_date("not a date") is None
    assert parse_date("") is None
    assert parse_date(None) is None


def test_normalize_date_falls_back_to_today():
    today = date(2026, 3, 14)
    assert normalize_date("garbage", today=today) == ("2026-03-14", True)
    assert normalize_date(None, today=today) == ("2026-03-14", True)


def test_normalize_date_passes_valid_dates_through():
    assert normalize_date("01.12.2025", today=date(2000, 1, 1)) == ("2025-12-01", False)


def test_normalize_date_never_raises_without_today():
    assert normalize_date(object()) == (date.today().isoformat(), True)
