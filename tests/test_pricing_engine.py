import logging

import pytest

from chain.errors import PoolNotFoundError
from chain.reader import StaticPoolReader
from core.base_types import CurrencyAmount, Token
from core.constants import ChainId
from core.errors import InvalidSlippageError
from core.fraction import Percent
from pricing.pair import Pair
from pricing.pricing_engine import (
    AddLiquidityRequest,
    PoolInfo,
    PricingEngine,
    QuoteError,
    RemoveLiquidityRequest,
    SwapRequest,
    TokenInfo,
)
from pricing.trade import TradeType

SWAP = "0x5"
MOVE = Token(ChainId.MOVE_MAINNET, "0xa", 6, "MOVE")
USDC = Token(ChainId.MOVE_MAINNET, "0xb", 6, "USDC")
WETH = Token(ChainId.MOVE_MAINNET, "0xc", 6, "WETH")
LONELY = Token(ChainId.MOVE_MAINNET, "0xd", 6, "LONELY")


def _engine(supply: int = 1_000_000_000) -> PricingEngine:
    lp_address = Pair.get_address(MOVE, USDC, SWAP)
    reader = StaticPoolReader(
        {
            (MOVE, USDC): (1_000_000_000, 2_000_000_000, 25),
            (MOVE, WETH): (10**12, 10**12, 30),
            (WETH, USDC): (10**12, 2 * 10**12, 25),
        },
        supplies={lp_address: supply},
        swap_address=SWAP,
    )
    return PricingEngine(reader, ChainId.MOVE_MAINNET, SWAP)


def test_create_token_uses_engine_chain():
    token = _engine().create_token(TokenInfo("0xa", 6, "MOVE", "Movement"))
    assert token == MOVE
    assert token.name == "Movement"


def test_pool_info():
    engine = _engine()
    assert engine.get_pool_info(USDC, MOVE) == PoolInfo(
        exists=True, fee_bps=25, reserve_a=2_000_000_000, reserve_b=1_000_000_000
    )
    assert engine.get_pool_info(MOVE, LONELY) == PoolInfo(
        exists=False, fee_bps=None, reserve_a=0, reserve_b=0
    )


def test_load_pair_keeps_pool_fee():
    pair = _engine().load_pair(MOVE, WETH)
    assert pair.fee_bps == 30
    assert pair.fee_numerator == 9970
    assert pair.liquidity_token.address == Pair.get_address(MOVE, WETH, SWAP)


def test_load_pair_missing_pool():
    with pytest.raises(PoolNotFoundError):
        _engine().load_pair(MOVE, LONELY)


def test_candidate_pairs_skip_missing(caplog):
    with caplog.at_level(logging.DEBUG, logger="pricing.pricing_engine"):
        pairs = _engine().load_candidate_pairs([MOVE, USDC, LONELY, MOVE])
    assert len(pairs) == 1
    assert "no pool" in caplog.text


def test_quote_prefers_deep_two_hop_route():
    engine = _engine()
    quote = engine.quote(
        MOVE, USDC, CurrencyAmount.from_human(MOVE, "100"), bases=(WETH,)
    )
    assert quote.trade.route.path == (MOVE, WETH, USDC)
    assert quote.routes_returned == 2
    assert quote.trade.trade_type is TradeType.EXACT_INPUT


def test_quote_routes_returned_capped_by_result_limit():
    quote = _engine().quote(
        MOVE, USDC, CurrencyAmount.from_human(MOVE, "100"), bases=(WETH,), max_num_results=1
    )
    assert quote.trade.route.path == (MOVE, WETH, USDC)
    assert quote.routes_returned == 1


def test_quote_without_route():
    with pytest.raises(QuoteError):
        _engine().quote(MOVE, LONELY, CurrencyAmount.from_human(MOVE, "1"))


def test_swap_parameters_default_slippage():
    engine = _engine()
    params = engine.swap(SwapRequest(MOVE, USDC, "1"))
    trade = engine.quote(MOVE, USDC, CurrencyAmount.from_human(MOVE, "1")).trade

    assert params.amount_in == "1000000"
    assert int(params.amount_out) == trade.output_amount.quotient * 995 // 1000
    assert params.trade_type is TradeType.EXACT_INPUT


def test_swap_exact_out_with_custom_slippage():
    params = _engine().swap(
        SwapRequest(MOVE, USDC, "10", exact_in=False, slippage="1")
    )
    assert params.amount_out == "10000000"
    assert params.trade_type is TradeType.EXACT_OUTPUT


def test_slippage_resolution():
    engine = _engine()
    assert engine.resolve_slippage(None) == Percent(50, 10_000)
    assert engine.resolve_slippage("0.25") == Percent(25, 10_000)
    assert engine.resolve_slippage(Percent(1, 100)) == Percent(1, 100)
    with pytest.raises(InvalidSlippageError):
        engine.resolve_slippage("100")


def test_add_liquidity_existing_pool_matches_ratio():
    params = _engine().add_liquidity(AddLiquidityRequest(USDC, MOVE, "10", fee_bps=99))
    assert params.amount_a == "10000000"
    assert params.amount_b == "5000000"
    assert params.min_amount_a == "9950000"
    assert params.min_amount_b == "4975000"
    assert params.fee == 25


def test_add_liquidity_new_pool_requires_amounts_and_fee():
    engine = _engine()
    with pytest.raises(ValueError):
        engine.add_liquidity(AddLiquidityRequest(MOVE, LONELY, "1"))
    with pytest.raises(ValueError):
        engine.add_liquidity(AddLiquidityRequest(MOVE, LONELY, "1", amount_b="2"))

    params = engine.add_liquidity(
        AddLiquidityRequest(MOVE, LONELY, "1", amount_b="2", fee_bps=30, slippage="0")
    )
    assert params.amount_b == "2000000"
    assert params.min_amount_b == "2000000"
    assert params.fee == 30


def test_remove_liquidity_uses_ledger_supply():
    params = _engine(supply=1_000_000_000).remove_liquidity(
        RemoveLiquidityRequest(USDC, MOVE, "1")
    )
    # 1 LP = 10**8 raw of 10**9 supply, i.e. a tenth of the pool
    assert params.amount == "100000000"
    assert params.min_amount_a == str(200_000_000 * 995 // 1000)
    assert params.min_amount_b == str(100_000_000 * 995 // 1000)
    assert params.token_a == str(USDC.address)
