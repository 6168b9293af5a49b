from decimal import Decimal

import pytest

from poker_settlement.money import format_amount, from_cents, to_cents, within_tolerance


def test_to_cents_accepts_common_types():
    """Ints, floats, Decimals and strings all land on the same cent value."""
    assert to_cents(10) == 1000
    assert to_cents(10.5) == 1050
    assert to_cents(Decimal("10.50")) == 1050
    assert to_cents("10.5") == 1050


def test_to_cents_rounds_half_away_from_zero():
    """Ties round away from zero on both sides."""
    assert to_cents("12.345") == 1235
    assert to_cents(10.005) == 1001
    assert to_cents(-10.005) == -1001
    assert to_cents("-0.005") == -1


def test_to_cents_float_noise():
    """Binary float artifacts do not leak into the cent value."""
    assert to_cents(0.1 + 0.2) == 30


def test_to_cents_rejects_garbage():
    with pytest.raises(ValueError, match="Not a valid amount"):
        to_cents("ten")


@pytest.mark.parametrize("value", [float("nan"), float("inf"), "-Infinity", Decimal("NaN"), "1e30"])
def test_to_cents_rejects_non_finite_and_huge(value):
    with pytest.raises(ValueError, match="Not a valid amount"):
        to_cents(value)


def test_from_cents_is_quantized():
    assert from_cents(4000) == Decimal("40.00")
    assert str(from_cents(-1)) == "-0.01"


def test_format_amount():
    assert format_amount(4000, currency="₪") == "40.00₪"
    assert format_amount(4000, signed=True) == "+40.00"
    assert format_amount(-4000, signed=True) == "-40.00"
    assert format_amount(0, signed=True) == "0.00"


def test_within_tolerance():
    assert within_tolerance(0)
    assert within_tolerance(1)
    assert within_tolerance(-1)
    assert not within_tolerance(2)
