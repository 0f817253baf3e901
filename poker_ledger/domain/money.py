"""Integer minor-unit (cents) helpers. Stored amounts never use floating point."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation as DecimalError, ROUND_HALF_UP

from .errors import ValidationError

CENTS_PER_UNIT = 100

_STRIP_PATTERN = re.compile(r"[^\d.\-+]")


def to_cents(amount: Decimal | int | float | str) -> int:
    if isinstance(amount, float):
        amount = str(amount)
    try:
        value = Decimal(amount)
    except (DecimalError, TypeError) as exc:
        raise ValidationError(f"invalid amount: {amount!r}") from exc
    if not value.is_finite():
        raise ValidationError(f"invalid amount: {amount!r}")
    return int((value * CENTS_PER_UNIT).to_integral_value(rounding=ROUND_HALF_UP))


def parse_amount(text: str) -> int:
    cleaned = _STRIP_PATTERN.sub("", text.strip())
    if not cleaned:
        raise ValidationError(f"invalid amount: {text!r}")
    return to_cents(cleaned)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / Decimal(CENTS_PER_UNIT)).quantize(Decimal("0.01"))


def format_cents(cents: int, currency: str = "$") -> str:
    sign = "-" if cents < 0 else ""
    return f"{sign}{currency}{from_cents(abs(cents))}"


def is_within_tolerance(variance_cents: int, tolerance_cents: int) -> bool:
    return abs(variance_cents) <= tolerance_cents
