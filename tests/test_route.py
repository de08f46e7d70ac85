import pytest

from core.base_types import CurrencyAmount, Token
from core.constants import ChainId
from core.errors import RouteContinuityError, RouteEndpointError, TokenMismatchError
from pricing.pair import Pair
from pricing.route import Route

A = Token(ChainId.MOVE_MAINNET, "0xa", 6, "A")
B = Token(ChainId.MOVE_MAINNET, "0xb", 6, "B")
C = Token(ChainId.MOVE_MAINNET, "0xc", 6, "C")
D = Token(ChainId.MOVE_MAINNET, "0xd", 6, "D")


def _pair(token_a: Token, reserve_a: int, token_b: Token, reserve_b: int) -> Pair:
    return Pair(
        CurrencyAmount.from_raw_amount(token_a, reserve_a),
        CurrencyAmount.from_raw_amount(token_b, reserve_b),
    )


AB = _pair(A, 1_000, B, 2_000)
BC = _pair(B, 1_000, C, 3_000)
CD = _pair(C, 1_000, D, 1_000)


def test_route_path_follows_pairs():
    route = Route([AB, BC], A)
    assert route.path == (A, B, C)
    assert route.input == A
    assert route.output == C
    assert route.num_hops == 2
    assert route.chain_id == ChainId.MOVE_MAINNET


def test_route_with_explicit_output():
    assert Route([AB, BC, CD], A, D).output == D
    with pytest.raises(RouteEndpointError):
        Route([AB, BC], A, B)


def test_route_reversed_direction():
    route = Route([BC, AB], C, A)
    assert route.path == (C, B, A)


def test_route_gap_rejected():
    with pytest.raises(RouteContinuityError):
        Route([AB, CD], A)


def test_route_input_not_in_first_pair():
    with pytest.raises(RouteEndpointError):
        Route([BC], A)
    assert issubclass(RouteEndpointError, RouteContinuityError)


def test_route_requires_pairs():
    with pytest.raises(ValueError):
        Route([], A)


def test_route_single_chain():
    testnet_b = Token(ChainId.MOVE_TESTNET, "0xb", 6)
    testnet_c = Token(ChainId.MOVE_TESTNET, "0xc", 6)
    foreign = _pair(testnet_b, 1, testnet_c, 1)
    with pytest.raises(TokenMismatchError):
        Route([AB, foreign], A)


def test_mid_price_is_product_of_hops():
    route = Route([AB, BC], A)
    mid = route.mid_price
    assert mid.base_token == A
    assert mid.quote_token == C
    assert mid.to_significant(6) == "6"
    assert Route([BC, AB], C).mid_price.to_significant(6) == "0.166667"
