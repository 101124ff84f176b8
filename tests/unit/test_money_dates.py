"""Unit tests for money and date helpers"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from nvjmi_finance.utils.date_utils import add_months, clamp_day_of_month, days_between, last_day_of_month
from nvjmi_finance.utils.money import cents_to_decimal, divide_cents, format_money, to_cents


@pytest.mark.parametrize(
    "value, cents",
    [
        (Decimal("10.00"), 1000),
        ("3.345", 335),
        (3.33, 333),
        (0.1 + 0.2, 30),
        (12, 1200),
        (None, 0),
        ("", 0),
        ("abc", 0),
        ("NaN", 0),
    ],
)
def test_to_cents(value, cents):
    assert to_cents(value) == cents


def test_cents_to_decimal():
    assert cents_to_decimal(334) == Decimal("3.34")
    assert cents_to_decimal(None) == Decimal("0.00")


def test_divide_cents_rounds_half_up():
    assert divide_cents(1000, 3) == 333
    assert divide_cents(1001, 2) == 501
    assert divide_cents(1000, 0) == 1000


def test_format_money():
    assert format_money(123456) == "RM 1,234.56"
    assert format_money(-500) == "-RM 5.00"
    assert format_money(0, "$") == "$ 0.00"


def test_days_between_ignores_time_of_day():
    assert days_between(datetime(2025, 6, 11, 0, 5), datetime(2025, 6, 10, 23, 55)) == 1
    assert days_between(date(2025, 6, 9), date(2025, 6, 10)) == -1


def test_month_helpers():
    assert last_day_of_month(date(2024, 2, 10)) == date(2024, 2, 29)
    assert clamp_day_of_month(2025, 4, 31) == date(2025, 4, 30)
    assert add_months(date(2025, 11, 30), 3) == date(2026, 2, 28)
