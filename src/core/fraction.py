"""Exact rational arithmetic used by every derived quantity.

Values keep their numerator and denominator exactly as composed; nothing is
reduced or rounded until a caller asks for a decimal string.
"""

from __future__ import annotations

from decimal import (
    ROUND_DOWN,
    ROUND_HALF_UP,
    ROUND_UP,
    Decimal,
    InvalidOperation,
    localcontext,
)
from enum import Enum
from math import gcd
from typing import Union

from .errors import DivisionByZeroError

BigintIsh = Union[int, str]


class Rounding(Enum):
    ROUND_DOWN = ROUND_DOWN  # truncate toward zero
    ROUND_HALF_UP = ROUND_HALF_UP
    ROUND_UP = ROUND_UP  # away from zero


def parse_bigint(value: BigintIsh) -> int:
    """Accept an int or a base-10 integer string."""
    if isinstance(value, bool):
        raise TypeError("bool is not an integer amount")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip(), 10)
        except ValueError as exc:
            raise ValueError(f"not an integer string: {value!r}") from exc
    raise TypeError(f"expected int or integer string, got {type(value).__name__}")


class Fraction:
    """Arbitrary-precision fraction. Immutable."""

    __slots__ = ("_numerator", "_denominator")

    def __init__(self, numerator: BigintIsh, denominator: BigintIsh = 1):
        num = parse_bigint(numerator)
        den = parse_bigint(denominator)
        if den == 0:
            raise DivisionByZeroError()
        if den < 0:
            num, den = -num, -den
        self._numerator = num
        self._denominator = den

    @property
    def numerator(self) -> int:
        return self._numerator

    @property
    def denominator(self) -> int:
        return self._denominator

    @property
    def quotient(self) -> int:
        """Integer part, truncated toward zero."""
        whole = abs(self._numerator) // self._denominator
        return -whole if self._numerator < 0 else whole

    @property
    def remainder(self) -> "Fraction":
        return Fraction(
            self._numerator - self.quotient * self._denominator, self._denominator
        )

    def as_fraction(self) -> "Fraction":
        return Fraction(self._numerator, self._denominator)

    def invert(self) -> "Fraction":
        return Fraction(self._denominator, self._numerator)

    def add(self, other: "Fraction | BigintIsh") -> "Fraction":
        other = _coerce(other)
        if self._denominator == other.denominator:
            return Fraction(self._numerator + other.numerator, self._denominator)
        return Fraction(
            self._numerator * other.denominator + other.numerator * self._denominator,
            self._denominator * other.denominator,
        )

    def subtract(self, other: "Fraction | BigintIsh") -> "Fraction":
        other = _coerce(other)
        if self._denominator == other.denominator:
            return Fraction(self._numerator - other.numerator, self._denominator)
        return Fraction(
            self._numerator * other.denominator - other.numerator * self._denominator,
            self._denominator * other.denominator,
        )

    def multiply(self, other: "Fraction | BigintIsh") -> "Fraction":
        other = _coerce(other)
        return Fraction(
            self._numerator * other.numerator, self._denominator * other.denominator
        )

    def divide(self, other: "Fraction | BigintIsh") -> "Fraction":
        other = _coerce(other)
        return Fraction(
            self._numerator * other.denominator, self._denominator * other.numerator
        )

    def less_than(self, other: "Fraction | BigintIsh") -> bool:
        other = _coerce(other)
        return self._numerator * other.denominator < other.numerator * self._denominator

    def equal_to(self, other: "Fraction | BigintIsh") -> bool:
        other = _coerce(other)
        return (
            self._numerator * other.denominator == other.numerator * self._denominator
        )

    def greater_than(self, other: "Fraction | BigintIsh") -> bool:
        other = _coerce(other)
        return self._numerator * other.denominator > other.numerator * self._denominator

    def to_significant(
        self,
        significant_digits: int,
        rounding: Rounding = Rounding.ROUND_HALF_UP,
    ) -> str:
        if not isinstance(significant_digits, int) or significant_digits <= 0:
            raise ValueError("significant_digits must be a positive int")
        with localcontext() as ctx:
            ctx.prec = significant_digits
            ctx.rounding = rounding.value
            value = Decimal(self._numerator) / Decimal(self._denominator)
        return format(value, "f")

    def to_fixed(
        self,
        decimal_places: int,
        rounding: Rounding = Rounding.ROUND_HALF_UP,
    ) -> str:
        if not isinstance(decimal_places, int) or decimal_places < 0:
            raise ValueError("decimal_places must be a non-negative int")
        scaled, rest = divmod(
            abs(self._numerator) * 10**decimal_places, self._denominator
        )
        if rest:
            if rounding is Rounding.ROUND_UP:
                scaled += 1
            elif rounding is Rounding.ROUND_HALF_UP and rest * 2 >= self._denominator:
                scaled += 1
        digits = str(scaled).rjust(decimal_places + 1, "0")
        if decimal_places:
            digits = f"{digits[:-decimal_places]}.{digits[-decimal_places:]}"
        if self._numerator < 0 and scaled != 0:
            return f"-{digits}"
        return digits

    def __add__(self, other: "Fraction | BigintIsh") -> "Fraction":
        return self.add(other)

    def __sub__(self, other: "Fraction | BigintIsh") -> "Fraction":
        return self.subtract(other)

    def __mul__(self, other: "Fraction | BigintIsh") -> "Fraction":
        return self.multiply(other)

    def __truediv__(self, other: "Fraction | BigintIsh") -> "Fraction":
        return self.divide(other)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, (Fraction, int)):
            return NotImplemented
        return self.less_than(other)

    def __le__(self, other: object) -> bool:
        if not isinstance(other, (Fraction, int)):
            return NotImplemented
        return not self.greater_than(other)

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, (Fraction, int)):
            return NotImplemented
        return self.greater_than(other)

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, (Fraction, int)):
            return NotImplemented
        return not self.less_than(other)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, bool) or not isinstance(other, (Fraction, int)):
            return NotImplemented
        return self.equal_to(other)

    def __hash__(self) -> int:
        divisor = gcd(self._numerator, self._denominator)
        return hash((self._numerator // divisor, self._denominator // divisor))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._numerator}, {self._denominator})"


def _coerce(value: "Fraction | BigintIsh") -> Fraction:
    if isinstance(value, Fraction):
        return value
    return Fraction(value)


_ONE_HUNDRED = Fraction(100)


class Percent(Fraction):
    """A fraction rendered as a percentage (1/2 prints as 50)."""

    __slots__ = ()

    @classmethod
    def from_bps(cls, bps: BigintIsh) -> "Percent":
        return cls(bps, 10000)

    @classmethod
    def from_human(cls, value: "str | Decimal") -> "Percent":
        """Percent number as text, e.g. '0.5' for half a percent."""
        if isinstance(value, float):
            raise TypeError("percent must be a string or Decimal, not float")
        if isinstance(value, str):
            try:
                value = Decimal(value.strip())
            except InvalidOperation as exc:
                raise ValueError(f"invalid percent: {value!r}") from exc
        if not isinstance(value, Decimal):
            raise TypeError("percent must be a string or Decimal")
        if not value.is_finite():
            raise ValueError("percent must be finite")
        numerator, denominator = value.as_integer_ratio()
        return cls(numerator, denominator * 100)

    @classmethod
    def _wrap(cls, fraction: Fraction) -> "Percent":
        return cls(fraction.numerator, fraction.denominator)

    def add(self, other: "Fraction | BigintIsh") -> "Percent":
        return Percent._wrap(super().add(other))

    def subtract(self, other: "Fraction | BigintIsh") -> "Percent":
        return Percent._wrap(super().subtract(other))

    def multiply(self, other: "Fraction | BigintIsh") -> "Percent":
        return Percent._wrap(super().multiply(other))

    def divide(self, other: "Fraction | BigintIsh") -> "Percent":
        return Percent._wrap(super().divide(other))

    def to_significant(
        self,
        significant_digits: int = 5,
        rounding: Rounding = Rounding.ROUND_HALF_UP,
    ) -> str:
        return self.as_fraction().multiply(_ONE_HUNDRED).to_significant(
            significant_digits, rounding
        )

    def to_fixed(
        self,
        decimal_places: int = 2,
        rounding: Rounding = Rounding.ROUND_HALF_UP,
    ) -> str:
        return self.as_fraction().multiply(_ONE_HUNDRED).to_fixed(
            decimal_places, rounding
        )

    def __str__(self) -> str:
        return f"{self.to_significant()}%"


ZERO_PERCENT = Percent(0)
ONE_HUNDRED_PERCENT = Percent(1)
