from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from core.base_types import Address, CurrencyAmount, Token
from core.constants import MAX_U64
from core.fraction import Fraction, parse_bigint

from .fees import validate_fee_bps
from .trade import Trade, TradeType, validate_slippage

AmountIsh = Union[CurrencyAmount, int, str]
TokenIsh = Union[Token, Address, str]

_ONE = Fraction(1)


@dataclass(frozen=True)
class AddLiquidityParameters:
    amount_a: str
    amount_b: str
    min_amount_a: str
    min_amount_b: str
    token_a: str
    token_b: str
    fee: int


@dataclass(frozen=True)
class RemoveLiquidityParameters:
    amount: str
    min_amount_a: str
    min_amount_b: str
    token_a: str
    token_b: str


@dataclass(frozen=True)
class SwapParameters:
    amount_in: str
    amount_out: str
    path: tuple[str, ...]
    trade_type: TradeType


def _to_raw(value: AmountIsh, name: str) -> int:
    if isinstance(value, CurrencyAmount):
        if value.denominator != 1:
            raise ValueError(f"{name} must be a raw integer amount")
        raw = value.quotient
    else:
        raw = parse_bigint(value)
    if raw < 0:
        raise ValueError(f"{name} must be non-negative")
    if raw > MAX_U64:
        raise ValueError(f"{name} exceeds u64 maximum")
    return raw


def _to_address(token: TokenIsh) -> str:
    if isinstance(token, Token):
        return str(token.address)
    return str(Address(str(token)))


class Router:
    """
    Builds the numeric arguments of router calls.

    Amounts come out as raw base-10 integer strings and tokens as normalised
    address strings; nothing is rounded here except the slippage bounds.
    """

    @staticmethod
    def validate_slippage(allowed_slippage: Fraction) -> Fraction:
        return validate_slippage(allowed_slippage)

    @staticmethod
    def minimum_amount(raw: AmountIsh, slippage: Fraction) -> int:
        """floor(raw * (1 - slippage))"""
        validate_slippage(slippage)
        adjusted = _ONE.subtract(slippage).multiply(_to_raw(raw, "amount"))
        return adjusted.numerator // adjusted.denominator

    @staticmethod
    def add_liquidity_parameters(
        amount_a: AmountIsh,
        amount_b: AmountIsh,
        min_amount_a: AmountIsh,
        min_amount_b: AmountIsh,
        token_a: TokenIsh,
        token_b: TokenIsh,
        fee_bps: int,
    ) -> AddLiquidityParameters:
        raw_a = _to_raw(amount_a, "amount_a")
        raw_b = _to_raw(amount_b, "amount_b")
        min_a = _to_raw(min_amount_a, "min_amount_a")
        min_b = _to_raw(min_amount_b, "min_amount_b")
        if min_a > raw_a or min_b > raw_b:
            raise ValueError("minimum amount exceeds desired amount")
        return AddLiquidityParameters(
            amount_a=str(raw_a),
            amount_b=str(raw_b),
            min_amount_a=str(min_a),
            min_amount_b=str(min_b),
            token_a=_to_address(token_a),
            token_b=_to_address(token_b),
            fee=validate_fee_bps(fee_bps, allow_full=True),
        )

    @staticmethod
    def remove_liquidity_parameters(
        lp_amount: AmountIsh,
        min_amount_a: AmountIsh,
        min_amount_b: AmountIsh,
        token_a: TokenIsh,
        token_b: TokenIsh,
    ) -> RemoveLiquidityParameters:
        return RemoveLiquidityParameters(
            amount=str(_to_raw(lp_amount, "lp_amount")),
            min_amount_a=str(_to_raw(min_amount_a, "min_amount_a")),
            min_amount_b=str(_to_raw(min_amount_b, "min_amount_b")),
            token_a=_to_address(token_a),
            token_b=_to_address(token_b),
        )

    @staticmethod
    def swap_call_parameters(trade: Trade, allowed_slippage: Fraction) -> SwapParameters:
        """
        Exact-in: the input and the slippage-bounded minimum output.
        Exact-out: the slippage-bounded maximum input and the output.
        """
        validate_slippage(allowed_slippage)
        if trade.trade_type is TradeType.EXACT_INPUT:
            amount_in = trade.input_amount
            amount_out = trade.minimum_amount_out(allowed_slippage)
        else:
            amount_in = trade.maximum_amount_in(allowed_slippage)
            amount_out = trade.output_amount
        return SwapParameters(
            amount_in=str(amount_in.quotient),
            amount_out=str(amount_out.quotient),
            path=tuple(str(token.address) for token in trade.route.path),
            trade_type=trade.trade_type,
        )
