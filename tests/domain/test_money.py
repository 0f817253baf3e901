from decimal import Decimal

import pytest

from poker_ledger.domain import ValidationError, format_cents, from_cents, is_within_tolerance, parse_amount, to_cents


@pytest.mark.parametrize(
    ("amount", "expected"),
    [
        (20, 2000),
        ("12.34", 1234),
        (Decimal("0.005"), 1),
        (0.1, 10),
        (19.99, 1999),
        ("-2.5", -250),
    ],
)
def test_to_cents(amount, expected) -> None:
    assert to_cents(amount) == expected


@pytest.mark.parametrize("amount", ["abc", "", "NaN", "Infinity"])
def test_to_cents_rejects_garbage(amount) -> None:
    with pytest.raises(ValidationError):
        to_cents(amount)


def test_parse_amount_strips_symbols() -> None:
    assert parse_amount(" $1,250.50 ") == 125050
    assert parse_amount("40") == 4000
    with pytest.raises(ValidationError):
        parse_amount("$")


def test_from_cents_and_format() -> None:
    assert from_cents(1234) == Decimal("12.34")
    assert from_cents(5) == Decimal("0.05")
    assert format_cents(1234) == "$12.34"
    assert format_cents(-1234) == "-$12.34"
    assert format_cents(0, "€") == "€0.00"


def test_is_within_tolerance() -> None:
    assert is_within_tolerance(100, 100)
    assert is_within_tolerance(-100, 100)
    assert not is_within_tolerance(101, 100)
