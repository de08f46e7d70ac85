"""
Trades over routes and the best-route search.

A Trade is computed once at construction: amounts, execution price, the mid
price after the trade and the price impact never change afterwards.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Optional, Sequence, TypeVar

from core.base_types import CurrencyAmount, Price, Token
from core.errors import (
    InsufficientInputAmountError,
    InsufficientReservesError,
    InvalidSlippageError,
    ReserveOverflowError,
    TokenMismatchError,
)
from core.fraction import Fraction, Percent

from .pair import Pair
from .route import Route

T = TypeVar("T")

_ONE = Fraction(1)


class TradeType(Enum):
    EXACT_INPUT = "exact_input"
    EXACT_OUTPUT = "exact_output"


def validate_slippage(allowed_slippage: Fraction) -> Fraction:
    if not isinstance(allowed_slippage, Fraction):
        raise InvalidSlippageError("slippage must be a Percent")
    if allowed_slippage < 0 or allowed_slippage >= 1:
        raise InvalidSlippageError(
            f"slippage must be in [0%, 100%), got {allowed_slippage!r}"
        )
    return allowed_slippage


def compute_price_impact(
    mid_price: Price, input_amount: CurrencyAmount, output_amount: CurrencyAmount
) -> Percent:
    """Shortfall of the realised output against the mid-price quote."""
    if input_amount.token != mid_price.base_token:
        raise TokenMismatchError("input amount must be in the mid price base token")
    # kept as a plain fraction, the hypothetical quote may exceed u64
    quoted = mid_price.as_fraction().multiply(input_amount.quotient)
    impact = quoted.subtract(output_amount.as_fraction()).divide(quoted)
    return Percent(impact.numerator, impact.denominator)


def sorted_insert(
    items: list[T], item: T, max_size: int, comparator: Callable[[T, T], int]
) -> Optional[T]:
    """
    Insert ``item`` into the sorted, bounded ``items`` in place.

    Returns whatever fell off the end: the previous last element, ``item``
    itself when it ranks last in a full list, or None.
    """
    if max_size <= 0:
        raise ValueError("max_size must be positive")
    if len(items) > max_size:
        raise ValueError("items already exceed max_size")
    if not items:
        items.append(item)
        return None

    is_full = len(items) == max_size
    if is_full and comparator(items[-1], item) <= 0:
        return item

    lo, hi = 0, len(items)
    while lo < hi:
        mid = (lo + hi) // 2
        if comparator(items[mid], item) <= 0:
            lo = mid + 1
        else:
            hi = mid
    items.insert(lo, item)
    return items.pop() if is_full else None


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def input_output_comparator(a: "Trade", b: "Trade") -> int:
    """Larger output first, then smaller input."""
    if a.input_amount.token != b.input_amount.token:
        raise TokenMismatchError("trades have different input tokens")
    if a.output_amount.token != b.output_amount.token:
        raise TokenMismatchError("trades have different output tokens")
    if a.output_amount.equal_to(b.output_amount):
        if a.input_amount.equal_to(b.input_amount):
            return 0
        return -1 if a.input_amount.less_than(b.input_amount) else 1
    return 1 if a.output_amount.less_than(b.output_amount) else -1


def trade_comparator(a: "Trade", b: "Trade") -> int:
    """Amounts first, then fewer hops, then the token path for a stable order."""
    result = input_output_comparator(a, b)
    if result != 0:
        return result
    result = _sign(a.route.num_hops - b.route.num_hops)
    if result != 0:
        return result
    path_a = [token.address.value for token in a.route.path]
    path_b = [token.address.value for token in b.route.path]
    return (path_a > path_b) - (path_a < path_b)


def _check_search_bounds(max_num_results: int, max_hops: int) -> None:
    if max_num_results < 1:
        raise ValueError("max_num_results must be at least 1")
    if max_hops < 1:
        raise ValueError("max_hops must be at least 1")


def _is_empty(pair: Pair) -> bool:
    return pair.reserve0.quotient == 0 or pair.reserve1.quotient == 0


class Trade:
    def __init__(
        self,
        route: Route,
        amount: CurrencyAmount,
        trade_type: TradeType,
        fee: Optional[int] = None,
    ):
        amounts: list[CurrencyAmount] = [amount] * len(route.path)
        next_pairs: list[Pair] = list(route.pairs)

        if trade_type is TradeType.EXACT_INPUT:
            if amount.token != route.input:
                raise TokenMismatchError("input amount must be in the route input token")
            for idx, pair in enumerate(route.pairs):
                amounts[idx + 1], next_pairs[idx] = pair.get_output_amount(
                    amounts[idx], fee
                )
        elif trade_type is TradeType.EXACT_OUTPUT:
            if amount.token != route.output:
                raise TokenMismatchError(
                    "output amount must be in the route output token"
                )
            for idx in range(len(route.pairs) - 1, -1, -1):
                amounts[idx], next_pairs[idx] = route.pairs[idx].get_input_amount(
                    amounts[idx + 1], fee
                )
        else:
            raise ValueError(f"unknown trade type: {trade_type!r}")

        self._route = route
        self._trade_type = trade_type
        self._input_amount = amounts[0]
        self._output_amount = amounts[-1]
        self._execution_price = Price(
            route.input,
            route.output,
            self._input_amount.quotient,
            self._output_amount.quotient,
        )
        self._next_mid_price = Route(next_pairs, route.input).mid_price
        self._price_impact = compute_price_impact(
            route.mid_price, self._input_amount, self._output_amount
        )

    @classmethod
    def exact_in(
        cls, route: Route, amount_in: CurrencyAmount, fee: Optional[int] = None
    ) -> "Trade":
        return cls(route, amount_in, TradeType.EXACT_INPUT, fee)

    @classmethod
    def exact_out(
        cls, route: Route, amount_out: CurrencyAmount, fee: Optional[int] = None
    ) -> "Trade":
        return cls(route, amount_out, TradeType.EXACT_OUTPUT, fee)

    @property
    def route(self) -> Route:
        return self._route

    @property
    def trade_type(self) -> TradeType:
        return self._trade_type

    @property
    def input_amount(self) -> CurrencyAmount:
        return self._input_amount

    @property
    def output_amount(self) -> CurrencyAmount:
        return self._output_amount

    @property
    def execution_price(self) -> Price:
        return self._execution_price

    @property
    def next_mid_price(self) -> Price:
        return self._next_mid_price

    @property
    def price_impact(self) -> Percent:
        return self._price_impact

    def minimum_amount_out(self, slippage_tolerance: Fraction) -> CurrencyAmount:
        """floor(out * (1 - slippage)) for exact-in; the exact output otherwise."""
        validate_slippage(slippage_tolerance)
        if self._trade_type is TradeType.EXACT_OUTPUT:
            return self._output_amount
        adjusted = _ONE.subtract(slippage_tolerance).multiply(
            self._output_amount.quotient
        )
        return CurrencyAmount.from_raw_amount(
            self._output_amount.token, adjusted.numerator // adjusted.denominator
        )

    def maximum_amount_in(self, slippage_tolerance: Fraction) -> CurrencyAmount:
        """ceil(in * (1 + slippage)) for exact-out; the exact input otherwise."""
        validate_slippage(slippage_tolerance)
        if self._trade_type is TradeType.EXACT_INPUT:
            return self._input_amount
        adjusted = _ONE.add(slippage_tolerance).multiply(self._input_amount.quotient)
        return CurrencyAmount.from_raw_amount(
            self._input_amount.token, -(-adjusted.numerator // adjusted.denominator)
        )

    @classmethod
    def best_trade_exact_in(
        cls,
        pairs: Sequence[Pair],
        amount_in: CurrencyAmount,
        token_out: Token,
        max_num_results: int = 3,
        max_hops: int = 3,
        fee: Optional[int] = None,
    ) -> list["Trade"]:
        """
        Best exact-input trades from ``amount_in.token`` to ``token_out``.

        Depth-first over an explicit stack. Every branch carries its own
        frozenset of visited tokens, so no route revisits a token or reuses
        a pair, and no route is longer than ``max_hops``.
        """
        _check_search_bounds(max_num_results, max_hops)
        if amount_in.token == token_out:
            raise ValueError("input and output tokens must differ")

        best: list[Trade] = []
        stack: list[tuple[tuple[Pair, ...], CurrencyAmount, frozenset[Token]]] = [
            ((), amount_in, frozenset({amount_in.token}))
        ]
        while stack:
            hops, amount, visited = stack.pop()
            for pair in pairs:
                if not pair.involves_token(amount.token) or _is_empty(pair):
                    continue
                far_token = pair.other_token(amount.token)
                if far_token in visited:
                    continue
                try:
                    amount_out, _ = pair.get_output_amount(amount, fee)
                except (
                    InsufficientInputAmountError,
                    InsufficientReservesError,
                    ReserveOverflowError,
                ):
                    continue

                next_hops = hops + (pair,)
                if far_token == token_out:
                    trade = cls.exact_in(
                        Route(next_hops, amount_in.token, token_out), amount_in, fee
                    )
                    sorted_insert(best, trade, max_num_results, trade_comparator)
                elif len(next_hops) < max_hops:
                    stack.append((next_hops, amount_out, visited | {far_token}))
        return best

    @classmethod
    def best_trade_exact_out(
        cls,
        pairs: Sequence[Pair],
        token_in: Token,
        amount_out: CurrencyAmount,
        max_num_results: int = 3,
        max_hops: int = 3,
        fee: Optional[int] = None,
    ) -> list["Trade"]:
        """Best exact-output trades, searched backward from ``amount_out.token``."""
        _check_search_bounds(max_num_results, max_hops)
        if token_in == amount_out.token:
            raise ValueError("input and output tokens must differ")
        if amount_out.quotient <= 0:
            raise ValueError("output amount must be positive")

        best: list[Trade] = []
        stack: list[tuple[tuple[Pair, ...], CurrencyAmount, frozenset[Token]]] = [
            ((), amount_out, frozenset({amount_out.token}))
        ]
        while stack:
            hops, amount, visited = stack.pop()
            for pair in pairs:
                if not pair.involves_token(amount.token) or _is_empty(pair):
                    continue
                far_token = pair.other_token(amount.token)
                if far_token in visited:
                    continue
                try:
                    amount_in, _ = pair.get_input_amount(amount, fee)
                except (
                    InsufficientInputAmountError,
                    InsufficientReservesError,
                    ReserveOverflowError,
                ):
                    continue

                next_hops = (pair,) + hops
                if far_token == token_in:
                    trade = cls.exact_out(
                        Route(next_hops, token_in, amount_out.token), amount_out, fee
                    )
                    sorted_insert(best, trade, max_num_results, trade_comparator)
                elif len(next_hops) < max_hops:
                    stack.append((next_hops, amount_in, visited | {far_token}))
        return best

    def __repr__(self) -> str:
        return (
            f"Trade({self._trade_type.value}, {self._route!r}, "
            f"in={self._input_amount.quotient}, out={self._output_amount.quotient})"
        )

