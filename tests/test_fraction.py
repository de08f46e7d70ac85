from decimal import Decimal
from fractions import Fraction as StdFraction

import pytest

from core.errors import DivisionByZeroError
from core.fraction import (
    ONE_HUNDRED_PERCENT,
    ZERO_PERCENT,
    Fraction,
    Percent,
    Rounding,
    parse_bigint,
)


def test_negative_denominator_moves_sign_to_numerator():
    value = Fraction(1, -2)
    assert value.numerator == -1
    assert value.denominator == 2


def test_zero_denominator_rejected():
    with pytest.raises(DivisionByZeroError):
        Fraction(1, 0)
    with pytest.raises(ZeroDivisionError):
        Fraction(3).divide(0)


def test_integer_strings_accepted():
    assert parse_bigint(" 42 ") == 42
    assert Fraction("10", "4") == Fraction(5, 2)
    with pytest.raises(ValueError):
        parse_bigint("1.5")
    with pytest.raises(TypeError):
        parse_bigint(True)


def test_equality_by_cross_multiplication_and_hash_consistent():
    assert Fraction(1, 2) == Fraction(2, 4)
    assert hash(Fraction(1, 2)) == hash(Fraction(50, 100))
    assert Fraction(2, 4).numerator == 2  # not reduced on construction
    assert Fraction(3, 1) == 3


def test_quotient_truncates_toward_zero():
    assert Fraction(7, 2).quotient == 3
    assert Fraction(-7, 2).quotient == -3
    assert Fraction(-7, 2).remainder == Fraction(-1, 2)


def test_arithmetic_is_exact():
    assert Fraction(1, 3) + Fraction(1, 6) == Fraction(1, 2)
    assert Fraction(1, 3) - 1 == Fraction(-2, 3)
    assert Fraction(2, 3) * Fraction(3, 4) == Fraction(1, 2)
    assert Fraction(1, 2) / Fraction(1, 4) == 2
    assert Fraction(2, 5).invert() == Fraction(5, 2)


def test_ordering():
    assert Fraction(1, 3) < Fraction(1, 2)
    assert Fraction(3, 2) > 1
    assert Fraction(2, 4) <= Fraction(1, 2)
    assert Fraction(1, 2) >= Fraction(1, 3)


def test_to_fixed_rounding_modes():
    assert Fraction(1, 3).to_fixed(4) == "0.3333"
    assert Fraction(2, 3).to_fixed(2) == "0.67"
    assert Fraction(2, 3).to_fixed(2, Rounding.ROUND_DOWN) == "0.66"
    assert Fraction(1, 3).to_fixed(2, Rounding.ROUND_UP) == "0.34"
    assert Fraction(5).to_fixed(0) == "5"
    assert Fraction(-1, 2).to_fixed(0) == "-1"
    assert Fraction(-1, 1000).to_fixed(2, Rounding.ROUND_DOWN) == "0.00"


def test_to_significant():
    assert Fraction(1, 3).to_significant(3) == "0.333"
    assert Fraction(2, 3).to_significant(2) == "0.67"
    assert Fraction(2, 3).to_significant(2, Rounding.ROUND_DOWN) == "0.66"
    assert Fraction(123456).to_significant(3) == "123000"
    with pytest.raises(ValueError):
        Fraction(1).to_significant(0)


@pytest.mark.parametrize(
    "numerator, denominator",
    [(1, 3), (2, 7), (-22, 7), (10**30 + 1, 10**12), (999, 1000)],
)
@pytest.mark.parametrize("places", [0, 2, 6, 18])
def test_to_fixed_within_precision(numerator, denominator, places):
    text = Fraction(numerator, denominator).to_fixed(places)
    error = abs(StdFraction(text) - StdFraction(numerator, denominator))
    assert error <= StdFraction(1, 10**places)


def test_percent_renders_scaled_by_hundred():
    assert Percent(50, 10000).to_fixed(2) == "0.50"
    assert str(Percent(1, 2)) == "50%"
    assert Percent.from_bps(25) == Percent(1, 400)
    assert ONE_HUNDRED_PERCENT == 1
    assert ZERO_PERCENT == 0


def test_percent_from_human():
    assert Percent.from_human("0.5") == Percent(5, 1000)
    assert Percent.from_human(Decimal("1")) == Percent(1, 100)
    with pytest.raises(TypeError):
        Percent.from_human(0.5)
    with pytest.raises(ValueError):
        Percent.from_human("half")


def test_percent_arithmetic_stays_percent():
    total = Percent(1, 100) + Percent(2, 100)
    assert isinstance(total, Percent)
    assert total == Percent(3, 100)
