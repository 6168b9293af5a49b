"""
Money helpers.

Amounts travel through the engine as integer cents. Callers may hand in
int, float, Decimal or str; everything is rounded to two decimals (ties
away from zero) on the way in and exposed as a quantized Decimal on the
way out.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

Amount = Union[int, float, Decimal, str]

CENT = Decimal("0.01")

# Balances within one cent are settled, both while matching and when checking a finished run.
EPSILON_CENTS = 1
TOLERANCE_CENTS = EPSILON_CENTS


def to_decimal(value: Amount) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # str() keeps the shortest repr, so 0.1 stays 0.1 and not 0.1000000000000000055...
        return Decimal(str(value))
    try:
        return Decimal(value)
    except InvalidOperation as e:
        raise ValueError(f"Not a valid amount: {value!r}") from e


def to_cents(value: Amount) -> int:
    d = to_decimal(value)
    if not d.is_finite():
        raise ValueError(f"Not a valid amount: {value!r}")
    try:
        quantized = d.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"Not a valid amount: {value!r}") from e
    return int(quantized * 100)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def within_tolerance(cents: int) -> bool:
    return abs(cents) <= TOLERANCE_CENTS


def format_amount(cents: int, *, currency: str = "", signed: bool = False) -> str:
    sign = "+" if signed and cents > 0 else ""
    return f"{sign}{from_cents(cents)}{currency}"
