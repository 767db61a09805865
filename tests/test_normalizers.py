from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from statement_analysis import format_amount, normalize_amount, normalize_date

# ---- Dates -------------------------------------------------------------------


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("05.01.2025", "2025-01-05"),
        ("5.1.2025", "2025-01-05"),
        ("31.12.2023", "2023-12-31"),
        ("29.02.2024", "2024-02-29"),
        ("Valuta 15.01.2025 Buchung", "2025-01-15"),
        ("01.07.2025 und 02.07.2025", "2025-07-01"),
    ],
)
def test_normalize_date_valid(raw: str, expected: str) -> None:
    assert normalize_date(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "",
        None,
        "kein Datum",
        "2025-01-05",
        "05.01.25",
        "31.02.2024",
        "29.02.2023",
    ],
)
def test_normalize_date_falls_back_to_today(raw: str | None) -> None:
    assert normalize_date(raw) == date.today().isoformat()


# ---- Amounts -----------------------------------------------------------------


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2.500,00 EUR", Decimal("2500.00")),
        ("-125,50 EUR", Decimal("-125.50")),
        ("-68,45 EUR", Decimal("-68.45")),
        ("1.234.567,89 EUR", Decimal("1234567.89")),
        ("+68,45 €", Decimal("68.45")),
        ("EURO 10,00", Decimal("10.00")),
        ("- 3,00 EUR", Decimal("-3.00")),
        ("12,5", Decimal("12.50")),
        ("12,505", Decimal("12.51")),
        ("42", Decimal("42.00")),
        ("12,50abc", Decimal("12.50")),
    ],
)
def test_normalize_amount(raw: str, expected: Decimal) -> None:
    result = normalize_amount(raw)
    assert result == expected
    assert result.as_tuple().exponent == -2


def test_normalize_amount_dot_only_is_a_decimal_point() -> None:
    # Without a comma the dot is not treated as a thousands separator.
    assert normalize_amount("2.500") == Decimal("2.50")


@pytest.mark.parametrize("raw", ["", None, "garbage", "EUR", "-", "-0,00 EUR"])
def test_normalize_amount_unparseable_or_zero(raw: str | None) -> None:
    result = normalize_amount(raw)
    assert result == Decimal("0.00")
    assert not result.is_signed()


def test_format_amount() -> None:
    assert format_amount(Decimal("-125.5")) == "-125.50"
    assert format_amount(Decimal("2500")) == "2500.00"
    assert format_amount(Decimal("0.005")) == "0.01"
