"""Core type definitions: ledger addresses, tokens, tagged amounts and prices."""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from functools import total_ordering
from typing import Optional

from eth_utils import is_hex, remove_0x_prefix

from .constants import MAX_U64
from .errors import TokenMismatchError
from .fraction import BigintIsh, Fraction, Rounding

_ACCOUNT_HEX_DIGITS = 64
_IDENTIFIER = r"[A-Za-z_][A-Za-z0-9_]*"
_STRUCT_TAG = re.compile(
    rf"(?P<account>[^:<>,\s]+)::(?P<module>{_IDENTIFIER})::(?P<name>{_IDENTIFIER})"
    r"(?:<(?P<args>.*)>)?",
    re.ASCII | re.DOTALL,
)
_HUMAN_AMOUNT = re.compile(r"(?P<whole>[0-9]*)(?:\.(?P<fraction>[0-9]*))?", re.ASCII)


def _account_digits(value: str) -> str:
    if not is_hex(value):
        raise ValueError("Invalid account address")
    digits = remove_0x_prefix(value).lower()
    if digits == "" or len(digits) > _ACCOUNT_HEX_DIGITS:
        raise ValueError("Invalid account address")
    return digits


def _long_account(value: str) -> str:
    return "0x" + _account_digits(value).rjust(_ACCOUNT_HEX_DIGITS, "0")


def _short_account(value: str) -> str:
    return "0x" + (_account_digits(value).lstrip("0") or "0")


def _split_type_args(args: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    start = 0
    for idx, char in enumerate(args):
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
            if depth < 0:
                raise ValueError("Invalid type tag")
        elif char == "," and depth == 0:
            parts.append(args[start:idx])
            start = idx + 1
    if depth != 0:
        raise ValueError("Invalid type tag")
    parts.append(args[start:])
    return [part.strip() for part in parts]


def _normalize_struct_tag(value: str) -> str:
    match = _STRUCT_TAG.fullmatch(value.strip())
    if match is None:
        raise ValueError("Invalid type tag")
    head = (
        f"{_short_account(match['account'])}::{match['module']}::{match['name']}"
    )
    if match["args"] is None:
        return head
    args = [_normalize_address(arg) for arg in _split_type_args(match["args"])]
    return f"{head}<{', '.join(args)}>"


def _normalize_address(value: str) -> str:
    if "::" in value:
        return _normalize_struct_tag(value)
    return _long_account(value.strip())


@dataclass(frozen=True)
class Address:
    """
    Move ledger address.

    Plain accounts (fungible asset metadata objects) are kept in 64-digit
    long form; coin type tags keep their account in short form.
    """

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TypeError("Address value must be a string")
        object.__setattr__(self, "value", _normalize_address(self.value))

    @classmethod
    def from_string(cls, s: str) -> "Address":
        return cls(s)

    @property
    def is_type_tag(self) -> bool:
        return "::" in self.value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Address):
            return self.value == other.value
        if isinstance(other, str):
            try:
                return self.value == _normalize_address(other)
            except ValueError:
                return False
        return False

    def __hash__(self) -> int:
        return hash(self.value)

    def __str__(self) -> str:
        return self.value


@total_ordering
@dataclass(frozen=True, eq=False)
class Token:
    """
    Token identity. Equal iff chain and address match.

    The (chain_id, address) order is the canonical order used for pair
    reserves and liquidity token identities.
    """

    chain_id: int
    address: Address
    decimals: int
    symbol: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.address, str):
            object.__setattr__(self, "address", Address(self.address))
        if not isinstance(self.address, Address):
            raise TypeError("address must be an Address or string")
        if not isinstance(self.chain_id, int) or isinstance(self.chain_id, bool):
            raise TypeError("chain_id must be an int")
        if (
            not isinstance(self.decimals, int)
            or isinstance(self.decimals, bool)
            or not 0 <= self.decimals < 256
        ):
            raise ValueError("decimals must be an integer in [0, 255]")

    @property
    def sort_key(self) -> tuple[int, str]:
        return (int(self.chain_id), self.address.value)

    def sorts_before(self, other: "Token") -> bool:
        if self == other:
            raise ValueError("cannot order a token against itself")
        return self.sort_key < other.sort_key

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return self.sort_key == other.sort_key

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return self.sort_key < other.sort_key

    def __hash__(self) -> int:
        return hash(self.sort_key)

    def __str__(self) -> str:
        return self.symbol or self.address.value


class CurrencyAmount(Fraction):
    """
    Amount of a specific token, stored as a raw (smallest unit) fraction.

    Human-readable strings are only produced or parsed here, at the
    boundary; the pricing math works on raw integers.
    """

    __slots__ = ("_token", "_decimal_scale")

    def __init__(self, token: Token, numerator: BigintIsh, denominator: BigintIsh = 1):
        super().__init__(numerator, denominator)
        if not isinstance(token, Token):
            raise TypeError("token must be a Token")
        if abs(self.quotient) > MAX_U64:
            raise ValueError("amount exceeds u64 maximum")
        self._token = token
        self._decimal_scale = 10**token.decimals

    @classmethod
    def from_raw_amount(cls, token: Token, raw: BigintIsh) -> "CurrencyAmount":
        return cls(token, raw)

    @classmethod
    def from_fractional_amount(
        cls, token: Token, numerator: BigintIsh, denominator: BigintIsh
    ) -> "CurrencyAmount":
        return cls(token, numerator, denominator)

    @classmethod
    def from_human(cls, token: Token, amount: str | Decimal) -> "CurrencyAmount":
        """Create from human-readable amount (e.g., '1.5')."""
        if isinstance(amount, float):
            raise TypeError("amount must be a string or Decimal, not float")
        if isinstance(amount, Decimal):
            text = format(amount, "f")
        elif isinstance(amount, str):
            text = amount.strip()
        else:
            raise TypeError("amount must be a string or Decimal")

        match = _HUMAN_AMOUNT.fullmatch(text)
        if match is None or not (match["whole"] or match["fraction"]):
            raise ValueError(f"invalid amount: {amount!r}")
        whole = match["whole"] or "0"
        fraction = match["fraction"] or ""
        if len(fraction) > token.decimals:
            if fraction[token.decimals :].strip("0"):
                raise ValueError("amount has more precision than decimals allow")
            fraction = fraction[: token.decimals]
        return cls(token, int(whole + fraction.ljust(token.decimals, "0")))

    @property
    def token(self) -> Token:
        return self._token

    @property
    def decimal_scale(self) -> int:
        return self._decimal_scale

    @property
    def raw(self) -> int:
        return self.quotient

    @property
    def human(self) -> Decimal:
        """Returns human-readable decimal."""
        return Decimal(self.to_exact())

    def _require_same_token(self, other: object) -> "CurrencyAmount":
        if not isinstance(other, CurrencyAmount):
            raise TypeError("expected a CurrencyAmount")
        if other.token != self._token:
            raise TokenMismatchError(
                f"token mismatch: {self._token} vs {other.token}"
            )
        return other

    def add(self, other: "Fraction | BigintIsh") -> "CurrencyAmount":
        other = self._require_same_token(other)
        added = super().add(other)
        return CurrencyAmount(self._token, added.numerator, added.denominator)

    def subtract(self, other: "Fraction | BigintIsh") -> "CurrencyAmount":
        other = self._require_same_token(other)
        subtracted = super().subtract(other)
        return CurrencyAmount(
            self._token, subtracted.numerator, subtracted.denominator
        )

    def multiply(self, other: "Fraction | BigintIsh") -> "CurrencyAmount":
        if isinstance(other, CurrencyAmount):
            raise TypeError("cannot multiply two currency amounts")
        multiplied = super().multiply(other)
        return CurrencyAmount(
            self._token, multiplied.numerator, multiplied.denominator
        )

    def divide(self, other: "Fraction | BigintIsh") -> "CurrencyAmount":
        if isinstance(other, CurrencyAmount):
            raise TypeError("cannot divide two currency amounts")
        divided = super().divide(other)
        return CurrencyAmount(self._token, divided.numerator, divided.denominator)

    def to_significant(
        self,
        significant_digits: int = 6,
        rounding: Rounding = Rounding.ROUND_DOWN,
    ) -> str:
        return (
            self.as_fraction()
            .divide(self._decimal_scale)
            .to_significant(significant_digits, rounding)
        )

    def to_fixed(
        self,
        decimal_places: int | None = None,
        rounding: Rounding = Rounding.ROUND_DOWN,
    ) -> str:
        if decimal_places is None:
            decimal_places = self._token.decimals
        if decimal_places > self._token.decimals:
            raise ValueError("decimal_places exceeds token decimals")
        return (
            self.as_fraction()
            .divide(self._decimal_scale)
            .to_fixed(decimal_places, rounding)
        )

    def to_exact(self) -> str:
        return self.to_fixed(self._token.decimals, Rounding.ROUND_DOWN)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CurrencyAmount):
            return NotImplemented
        return other.token == self._token and self.equal_to(other)

    def __hash__(self) -> int:
        return hash((self._token, super().__hash__()))

    def __str__(self) -> str:
        return f"{self.to_exact()} {self._token.symbol or ''}".strip()

    def __repr__(self) -> str:
        return (
            f"CurrencyAmount({self._token}, {self.numerator}, {self.denominator})"
        )


class Price(Fraction):
    """
    Price of base_token in quote_token, as quote raw units per base raw unit.

    The stored fraction is raw; ``adjusted_for_decimals`` gives the price in
    whole-token terms.
    """

    __slots__ = ("_base_token", "_quote_token", "_scalar")

    def __init__(
        self,
        base_token: Token,
        quote_token: Token,
        denominator: BigintIsh,
        numerator: BigintIsh,
    ):
        super().__init__(numerator, denominator)
        self._base_token = base_token
        self._quote_token = quote_token
        self._scalar = Fraction(10**base_token.decimals, 10**quote_token.decimals)

    @classmethod
    def from_amounts(
        cls, base_amount: CurrencyAmount, quote_amount: CurrencyAmount
    ) -> "Price":
        return cls(
            base_amount.token,
            quote_amount.token,
            base_amount.quotient,
            quote_amount.quotient,
        )

    @property
    def base_token(self) -> Token:
        return self._base_token

    @property
    def quote_token(self) -> Token:
        return self._quote_token

    @property
    def scalar(self) -> Fraction:
        return self._scalar

    @property
    def adjusted_for_decimals(self) -> Fraction:
        return self.as_fraction().multiply(self._scalar)

    def invert(self) -> "Price":
        return Price(self._quote_token, self._base_token, self.numerator, self.denominator)

    def multiply(self, other: "Fraction | BigintIsh") -> "Price":
        if not isinstance(other, Price):
            raise TypeError("a price can only be multiplied by another price")
        if self._quote_token != other.base_token:
            raise TokenMismatchError(
                f"cannot chain price in {self._quote_token} with price of {other.base_token}"
            )
        product = self.as_fraction().multiply(other.as_fraction())
        return Price(
            self._base_token, other.quote_token, product.denominator, product.numerator
        )

    def quote(self, amount: CurrencyAmount) -> CurrencyAmount:
        """Value ``amount`` of base token in quote token."""
        if not isinstance(amount, CurrencyAmount) or amount.token != self._base_token:
            raise TokenMismatchError("amount must be denominated in the base token")
        result = self.as_fraction().multiply(amount.as_fraction())
        return CurrencyAmount.from_fractional_amount(
            self._quote_token, result.numerator, result.denominator
        )

    def to_significant(
        self,
        significant_digits: int = 6,
        rounding: Rounding = Rounding.ROUND_HALF_UP,
    ) -> str:
        return self.adjusted_for_decimals.to_significant(significant_digits, rounding)

    def to_fixed(
        self,
        decimal_places: int = 4,
        rounding: Rounding = Rounding.ROUND_HALF_UP,
    ) -> str:
        return self.adjusted_for_decimals.to_fixed(decimal_places, rounding)

    def __repr__(self) -> str:
        return (
            f"Price({self._base_token}/{self._quote_token}, "
            f"{self.numerator}, {self.denominator})"
        )
