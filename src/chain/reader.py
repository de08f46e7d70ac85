"""
Pool state readers.

The pricing engine only sees the ``PoolReader`` protocol; these classes are
the two implementations: live view-function calls against a node, and an
in-memory snapshot.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol

from core.base_types import Address, Token
from core.constants import FEE_PRECISION, NULL_ADDRESS, SWAP_MODULE
from pricing.pair import Pair

from .client import LedgerClient
from .errors import MalformedResponseError, PoolNotFoundError, RPCError

logger = logging.getLogger(__name__)

_PAIR_METADATA_FIELDS = 9
_PAIR_METADATA_FEE_INDEX = 7
_FA_SUPPLY_FUNCTION = "0x1::fungible_asset::supply"
_FA_METADATA_TYPE = "0x1::fungible_asset::Metadata"


class PoolReader(Protocol):
    def get_reserves(self, token_a: Token, token_b: Token) -> tuple[int, int]:
        """Reserves in caller order."""
        ...

    def get_fee(self, token_a: Token, token_b: Token) -> int:
        """Pool fee in basis points."""
        ...

    def get_liquidity_token_supply(self, liquidity_token: Token) -> int:
        ...

    def pool_exists(self, token_a: Token, token_b: Token) -> bool:
        ...

    def get_lp_token(self, token_a: Token, token_b: Token) -> Address:
        ...


def _canonical(token_a: Token, token_b: Token) -> tuple[Token, Token, bool]:
    """Canonical order, plus whether the caller's order was reversed."""
    if token_a.sorts_before(token_b):
        return token_a, token_b, False
    return token_b, token_a, True


def _parse_u64(value: Any, field: str) -> int:
    if isinstance(value, bool) or value is None:
        raise MalformedResponseError(f"{field}: expected integer, got {value!r}")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and value.isdigit():
        parsed = int(value)
    else:
        raise MalformedResponseError(f"{field}: expected integer, got {value!r}")
    if parsed < 0:
        raise MalformedResponseError(f"{field}: negative value {parsed}")
    return parsed


class LedgerPoolReader:
    """Reads pool state through the swap module's view functions."""

    def __init__(self, client: LedgerClient, swap_address: Address | str):
        self._client = client
        self._swap_address = Address(str(swap_address))

    def _function(self, name: str) -> str:
        return str(Address(f"{self._swap_address}::{SWAP_MODULE}::{name}"))

    def _view_pair(self, name: str, token_a: Token, token_b: Token) -> list[Any]:
        token0, token1, _ = _canonical(token_a, token_b)
        return self._client.view(
            self._function(name), [str(token0.address), str(token1.address)]
        )

    def _raw_reserves(self, token_a: Token, token_b: Token) -> tuple[int, int]:
        response = self._view_pair("token_reserves", token_a, token_b)
        if len(response) < 2:
            raise MalformedResponseError(
                f"token_reserves: expected 2 values, got {len(response)}"
            )
        return (
            _parse_u64(response[0], "reserve0"),
            _parse_u64(response[1], "reserve1"),
        )

    def pool_exists(self, token_a: Token, token_b: Token) -> bool:
        """A pool exists when its reserves can be read and both are non-zero."""
        try:
            reserve0, reserve1 = self._raw_reserves(token_a, token_b)
        except RPCError as exc:
            logger.debug("no pool for %s/%s: %s", token_a, token_b, exc)
            return False
        return reserve0 > 0 and reserve1 > 0

    def get_reserves(self, token_a: Token, token_b: Token) -> tuple[int, int]:
        try:
            reserve0, reserve1 = self._raw_reserves(token_a, token_b)
        except RPCError as exc:
            raise PoolNotFoundError(
                f"Pool does not exist between {token_a} and {token_b}"
            ) from exc
        if reserve0 == 0 or reserve1 == 0:
            raise PoolNotFoundError(f"Pool between {token_a} and {token_b} is empty")
        _, _, reversed_order = _canonical(token_a, token_b)
        if reversed_order:
            return reserve1, reserve0
        return reserve0, reserve1

    def get_fee(self, token_a: Token, token_b: Token) -> int:
        try:
            response = self._view_pair("get_pair_metadata", token_a, token_b)
        except RPCError as exc:
            raise PoolNotFoundError(
                f"Pool does not exist between {token_a} and {token_b}"
            ) from exc
        if len(response) < _PAIR_METADATA_FIELDS:
            raise MalformedResponseError(
                f"get_pair_metadata: expected {_PAIR_METADATA_FIELDS} fields, "
                f"got {len(response)}"
            )
        fee = _parse_u64(response[_PAIR_METADATA_FEE_INDEX], "swap_fee")
        # at 10000 bps nothing of the input is swapped
        if fee >= FEE_PRECISION:
            raise MalformedResponseError(f"swap_fee out of range: {fee}")
        return fee

    def get_lp_token(self, token_a: Token, token_b: Token) -> Address:
        response = self._view_pair("get_lp_token", token_a, token_b)
        try:
            inner = response[0]["inner"]
        except (IndexError, KeyError, TypeError) as exc:
            raise MalformedResponseError("get_lp_token: expected [{inner: address}]") from exc
        try:
            return Address(inner)
        except (TypeError, ValueError) as exc:
            raise MalformedResponseError(f"get_lp_token: bad address {inner!r}") from exc

    def get_liquidity_token_supply(self, liquidity_token: Token) -> int:
        response = self._client.view(
            _FA_SUPPLY_FUNCTION, [str(liquidity_token.address)], [_FA_METADATA_TYPE]
        )
        try:
            option = response[0]["vec"]
        except (IndexError, KeyError, TypeError) as exc:
            raise MalformedResponseError("supply: expected [{vec: [amount]}]") from exc
        if not isinstance(option, list) or len(option) > 1:
            raise MalformedResponseError("supply: expected an option value")
        if not option:
            # Unlimited-supply assets do not track a total.
            raise MalformedResponseError("supply: liquidity token has no tracked supply")
        return _parse_u64(option[0], "supply")


class StaticPoolReader:
    """
    Point-in-time pool snapshot held in memory.

    ``pools`` maps a token pair (any order) to ``(reserve_a, reserve_b,
    fee_bps)`` in the order of the key; ``supplies`` maps liquidity token
    addresses to their total supply.
    """

    def __init__(
        self,
        pools: Mapping[tuple[Token, Token], tuple[int, int, int]],
        supplies: Optional[Mapping[Address | str, int]] = None,
        swap_address: Address | str = NULL_ADDRESS,
    ):
        self._pools: dict[tuple[Token, Token], tuple[int, int, int]] = {}
        for (token_a, token_b), (reserve_a, reserve_b, fee_bps) in pools.items():
            token0, token1, reversed_order = _canonical(token_a, token_b)
            if reversed_order:
                reserve_a, reserve_b = reserve_b, reserve_a
            self._pools[(token0, token1)] = (reserve_a, reserve_b, fee_bps)
        self._supplies = {
            Address(str(address)): supply for address, supply in (supplies or {}).items()
        }
        self._swap_address = swap_address

    def _lookup(self, token_a: Token, token_b: Token) -> tuple[int, int, int, bool]:
        token0, token1, reversed_order = _canonical(token_a, token_b)
        entry = self._pools.get((token0, token1))
        if entry is None:
            raise PoolNotFoundError(f"Pool does not exist between {token_a} and {token_b}")
        return (*entry, reversed_order)

    def pool_exists(self, token_a: Token, token_b: Token) -> bool:
        token0, token1, _ = _canonical(token_a, token_b)
        return (token0, token1) in self._pools

    def get_reserves(self, token_a: Token, token_b: Token) -> tuple[int, int]:
        reserve0, reserve1, _, reversed_order = self._lookup(token_a, token_b)
        if reversed_order:
            return reserve1, reserve0
        return reserve0, reserve1

    def get_fee(self, token_a: Token, token_b: Token) -> int:
        return self._lookup(token_a, token_b)[2]

    def get_lp_token(self, token_a: Token, token_b: Token) -> Address:
        self._lookup(token_a, token_b)
        return Pair.get_address(token_a, token_b, self._swap_address)

    def get_liquidity_token_supply(self, liquidity_token: Token) -> int:
        try:
            return self._supplies[liquidity_token.address]
        except KeyError as exc:
            raise PoolNotFoundError(f"no supply recorded for {liquidity_token}") from exc
