from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from decimal import Decimal
from itertools import combinations
from typing import Optional, Sequence, Union

from chain.reader import PoolReader
from core.base_types import Address, CurrencyAmount, Token
from core.constants import NULL_ADDRESS, ChainId
from core.errors import PricingError
from core.fraction import Fraction, Percent

from .pair import Pair
from .router import (
    AddLiquidityParameters,
    RemoveLiquidityParameters,
    Router,
    SwapParameters,
)
from .trade import Trade

logger = logging.getLogger(__name__)

SlippageIsh = Union[Fraction, str, Decimal, None]
HumanAmount = Union[str, Decimal]

DEFAULT_SLIPPAGE = Percent(50, 10000)


@dataclass(frozen=True)
class TokenInfo:
    address: str
    decimals: int
    symbol: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class PoolInfo:
    exists: bool
    fee_bps: Optional[int]
    reserve_a: int
    reserve_b: int


@dataclass(frozen=True)
class SwapRequest:
    token_in: Token
    token_out: Token
    amount: HumanAmount
    exact_in: bool = True
    slippage: SlippageIsh = None
    bases: tuple[Token, ...] = ()
    max_hops: int = 3


@dataclass(frozen=True)
class AddLiquidityRequest:
    token_a: Token
    token_b: Token
    amount_a: HumanAmount
    amount_b: Optional[HumanAmount] = None
    fee_bps: Optional[int] = None
    slippage: SlippageIsh = None


@dataclass(frozen=True)
class RemoveLiquidityRequest:
    token_a: Token
    token_b: Token
    lp_amount: HumanAmount
    slippage: SlippageIsh = None


@dataclass
class Quote:
    trade: Trade
    routes_returned: int
    timestamp: int


class QuoteError(PricingError):
    """Raised when a quote cannot be produced."""


class PricingEngine:
    """
    Main interface for the pricing module.
    Loads pool snapshots through an injected reader and turns them into
    quotes and router call parameters.
    """

    def __init__(
        self,
        reader: PoolReader,
        chain_id: int = ChainId.MOVE_MAINNET,
        swap_address: Address | str = NULL_ADDRESS,
        default_slippage: Fraction = DEFAULT_SLIPPAGE,
    ):
        self.reader = reader
        self.chain_id = int(chain_id)
        self.swap_address = swap_address
        self.default_slippage = Router.validate_slippage(default_slippage)

    def create_token(self, info: TokenInfo) -> Token:
        return Token(
            chain_id=self.chain_id,
            address=info.address,
            decimals=info.decimals,
            symbol=info.symbol,
            name=info.name,
        )

    def resolve_slippage(self, slippage: SlippageIsh) -> Fraction:
        """Percent as given, or a percent number such as '0.5'."""
        if slippage is None:
            return self.default_slippage
        if isinstance(slippage, Fraction):
            return Router.validate_slippage(slippage)
        return Router.validate_slippage(Percent.from_human(slippage))

    def load_pair(
        self,
        token_a: Token,
        token_b: Token,
        liquidity_address: Address | str | None = None,
    ) -> Pair:
        """Snapshot one pool from the reader."""
        reserve_a, reserve_b = self.reader.get_reserves(token_a, token_b)
        fee_bps = self.reader.get_fee(token_a, token_b)
        logger.debug(
            "loaded pool %s/%s reserves=%s/%s fee=%sbps",
            token_a,
            token_b,
            reserve_a,
            reserve_b,
            fee_bps,
        )
        return Pair(
            CurrencyAmount.from_raw_amount(token_a, reserve_a),
            CurrencyAmount.from_raw_amount(token_b, reserve_b),
            fee_bps=fee_bps,
            liquidity_address=liquidity_address,
            swap_address=self.swap_address,
        )

    def get_pool_info(self, token_a: Token, token_b: Token) -> PoolInfo:
        if not self.reader.pool_exists(token_a, token_b):
            return PoolInfo(exists=False, fee_bps=None, reserve_a=0, reserve_b=0)
        reserve_a, reserve_b = self.reader.get_reserves(token_a, token_b)
        return PoolInfo(
            exists=True,
            fee_bps=self.reader.get_fee(token_a, token_b),
            reserve_a=reserve_a,
            reserve_b=reserve_b,
        )

    def load_candidate_pairs(self, tokens: Sequence[Token]) -> list[Pair]:
        """Every existing pool between any two of ``tokens``."""
        unique: list[Token] = []
        for token in tokens:
            if token not in unique:
                unique.append(token)

        pairs: list[Pair] = []
        for token_a, token_b in combinations(unique, 2):
            if not self.reader.pool_exists(token_a, token_b):
                logger.debug("skipping %s/%s: no pool", token_a, token_b)
                continue
            pairs.append(self.load_pair(token_a, token_b))
        return pairs

    def quote(
        self,
        token_in: Token,
        token_out: Token,
        amount: CurrencyAmount,
        exact_in: bool = True,
        bases: Sequence[Token] = (),
        max_hops: int = 3,
        max_num_results: int = 3,
    ) -> Quote:
        """
        Get best quote for a swap.

        ``amount`` is the input for exact-in quotes and the output for
        exact-out quotes. Intermediate hops may only go through ``bases``.
        """
        pairs = self.load_candidate_pairs([token_in, token_out, *bases])
        if not pairs:
            raise QuoteError(f"no pools between {token_in} and {token_out}")

        if exact_in:
            trades = Trade.best_trade_exact_in(
                pairs, amount, token_out, max_num_results, max_hops
            )
        else:
            trades = Trade.best_trade_exact_out(
                pairs, token_in, amount, max_num_results, max_hops
            )
        if not trades:
            raise QuoteError(f"no route from {token_in} to {token_out}")

        return Quote(
            trade=trades[0],
            routes_returned=len(trades),
            timestamp=int(time.time()),
        )

    def swap(self, request: SwapRequest) -> SwapParameters:
        slippage = self.resolve_slippage(request.slippage)
        amount_token = request.token_in if request.exact_in else request.token_out
        amount = CurrencyAmount.from_human(amount_token, request.amount)
        quote = self.quote(
            request.token_in,
            request.token_out,
            amount,
            exact_in=request.exact_in,
            bases=request.bases,
            max_hops=request.max_hops,
        )
        params = Router.swap_call_parameters(quote.trade, slippage)
        logger.info(
            "swap %s -> %s via %d hop(s): in=%s out=%s impact=%s",
            request.token_in,
            request.token_out,
            quote.trade.route.num_hops,
            params.amount_in,
            params.amount_out,
            quote.trade.price_impact,
        )
        return params

    def add_liquidity(self, request: AddLiquidityRequest) -> AddLiquidityParameters:
        """
        Existing pool: the pool's own fee applies and a missing ``amount_b``
        is matched to the current reserve ratio. New pool: both amounts and
        a fee are required.
        """
        slippage = self.resolve_slippage(request.slippage)
        token_a, token_b = request.token_a, request.token_b
        amount_a = CurrencyAmount.from_human(token_a, request.amount_a)

        if self.reader.pool_exists(token_a, token_b):
            pair = self.load_pair(token_a, token_b)
            fee_bps = pair.fee_bps
            if request.fee_bps is not None and request.fee_bps != fee_bps:
                logger.warning(
                    "ignoring fee %sbps, pool %s/%s charges %sbps",
                    request.fee_bps,
                    token_a,
                    token_b,
                    fee_bps,
                )
            if request.amount_b is None:
                amount_b = CurrencyAmount.from_raw_amount(
                    token_b,
                    amount_a.quotient
                    * pair.reserve_of(token_b).quotient
                    // pair.reserve_of(token_a).quotient,
                )
            else:
                amount_b = CurrencyAmount.from_human(token_b, request.amount_b)
        else:
            if request.amount_b is None or request.fee_bps is None:
                raise ValueError("a new pool needs both amounts and a fee")
            fee_bps = request.fee_bps
            amount_b = CurrencyAmount.from_human(token_b, request.amount_b)

        params = Router.add_liquidity_parameters(
            amount_a,
            amount_b,
            Router.minimum_amount(amount_a, slippage),
            Router.minimum_amount(amount_b, slippage),
            token_a,
            token_b,
            fee_bps,
        )
        logger.info(
            "add liquidity %s/%s: %s/%s min %s/%s fee=%sbps",
            token_a,
            token_b,
            params.amount_a,
            params.amount_b,
            params.min_amount_a,
            params.min_amount_b,
            params.fee,
        )
        return params

    def remove_liquidity(
        self, request: RemoveLiquidityRequest
    ) -> RemoveLiquidityParameters:
        slippage = self.resolve_slippage(request.slippage)
        token_a, token_b = request.token_a, request.token_b
        lp_address = self.reader.get_lp_token(token_a, token_b)
        pair = self.load_pair(token_a, token_b, liquidity_address=lp_address)

        liquidity = CurrencyAmount.from_human(pair.liquidity_token, request.lp_amount)
        total_supply = CurrencyAmount.from_raw_amount(
            pair.liquidity_token,
            self.reader.get_liquidity_token_supply(pair.liquidity_token),
        )
        expected_a = pair.get_liquidity_value(token_a, total_supply, liquidity)
        expected_b = pair.get_liquidity_value(token_b, total_supply, liquidity)

        params = Router.remove_liquidity_parameters(
            liquidity,
            Router.minimum_amount(expected_a, slippage),
            Router.minimum_amount(expected_b, slippage),
            token_a,
            token_b,
        )
        logger.info(
            "remove liquidity %s/%s: lp=%s expect %s/%s min %s/%s",
            token_a,
            token_b,
            params.amount,
            expected_a.quotient,
            expected_b.quotient,
            params.min_amount_a,
            params.min_amount_b,
        )
        return params
