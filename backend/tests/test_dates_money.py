from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from interest_calc.utils.dates import days_between, to_calendar_date
from interest_calc.utils.money import amount_or_dash, currency, d2, fixed2, parse_money


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("$10,000.00", Decimal("10000.00")),
        (" 1 250.5 ", Decimal("1250.5")),
        ("-75", Decimal("-75")),
        (42, Decimal("42")),
        (12.5, Decimal("12.5")),
        (Decimal("3.14"), Decimal("3.14")),
        ("USD 9", Decimal("9")),
    ],
)
def test_parse_money_accepts_typed_amounts(raw, expected):
    assert parse_money(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "abc", "-", ".", "1.2.3", "1-2", float("inf"), float("nan"), True])
def test_parse_money_rejects_non_finite_or_garbage(raw):
    assert parse_money(raw) is None


def test_d2_rounds_half_up():
    assert d2(Decimal("0.125")) == Decimal("0.13")
    assert d2(Decimal("2.675")) == Decimal("2.68")
    assert fixed2(Decimal("7")) == "7.00"


def test_currency_formatting():
    assert currency(Decimal("1234.5")) == "$1,234.50"
    assert currency(Decimal("-0.999")) == "-$1.00"
    assert amount_or_dash(Decimal("0")) == "—"
    assert amount_or_dash(Decimal("5")) == "$5.00"


def test_to_calendar_date_truncates_to_utc_day():
    assert to_calendar_date("2024-02-29") == date(2024, 2, 29)
    assert to_calendar_date(datetime(2024, 1, 1, 23, 59)) == date(2024, 1, 1)
    assert to_calendar_date(datetime(2024, 1, 1, 20, 0, tzinfo=timezone(timedelta(hours=-8)))) == date(2024, 1, 2)
    assert to_calendar_date("2024-01-01T01:00:00+05:00") == date(2023, 12, 31)
    assert to_calendar_date("") is None
    assert to_calendar_date("31/01/2024") is None


def test_days_between():
    assert days_between(date(2024, 1, 1), date(2024, 12, 31)) == 365
    assert days_between(date(2023, 1, 1), date(2023, 12, 31)) == 364
    assert days_between("2024-03-01", "2024-02-01") == -29
    assert days_between(None, date(2024, 1, 1)) == 0
