"""Protocol constants shared by the pricing core."""

from __future__ import annotations

from enum import IntEnum


class ChainId(IntEnum):
    MOVE_MAINNET = 126
    MOVE_TESTNET = 250


MINIMUM_LIQUIDITY = 1000

# Fees are expressed over 10000: a numerator of 9975 keeps 99.75% of the input.
FEE_PRECISION = 10000
DEFAULT_FEE_BPS = 25
DEFAULT_FEE = FEE_PRECISION - DEFAULT_FEE_BPS

# Move u64, the width of coin and fungible asset balances.
MAX_U64 = 2**64 - 1

# Used in type tags when the deployed swap package is not known (offline quoting).
NULL_ADDRESS = "0x0"

SWAP_MODULE = "swap"
ROUTER_MODULE = "router"

LP_TOKEN_DECIMALS = 8
LP_TOKEN_SYMBOL = "Warpgate-LP"


def pair_lp_type_tag(swap_address: str = NULL_ADDRESS) -> str:
    return f"{swap_address}::{SWAP_MODULE}::LPToken"


def pair_reserve_type_tag(swap_address: str = NULL_ADDRESS) -> str:
    return f"{swap_address}::{SWAP_MODULE}::TokenPairReserve"
