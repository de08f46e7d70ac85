"""Entry-function payloads for the swap router, built from computed parameters."""

from __future__ import annotations

from dataclasses import dataclass, field

from core.base_types import Address, Token
from core.constants import ROUTER_MODULE
from pricing.router import (
    AddLiquidityParameters,
    RemoveLiquidityParameters,
    SwapParameters,
)
from pricing.trade import TradeType


@dataclass(frozen=True)
class EntryFunctionPayload:
    function: str
    function_arguments: list = field(default_factory=list)
    type_arguments: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "type": "entry_function_payload",
            "function": self.function,
            "type_arguments": list(self.type_arguments),
            "arguments": list(self.function_arguments),
        }


class PayloadBuilder:
    """
    Formats router call parameters for a deployed swap package.

    Usage:
        builder = PayloadBuilder(swap_address)
        payload = builder.swap(Router.swap_call_parameters(trade, slippage))
    """

    def __init__(self, swap_address: Address | str):
        self._swap_address = Address(str(swap_address))

    def _function(self, name: str) -> str:
        return str(Address(f"{self._swap_address}::{ROUTER_MODULE}::{name}"))

    def create_pair(self, token_a: Token, token_b: Token) -> EntryFunctionPayload:
        token0, token1 = (
            (token_a, token_b) if token_a.sorts_before(token_b) else (token_b, token_a)
        )
        return EntryFunctionPayload(
            function=self._function("create_pair"),
            function_arguments=[str(token0.address), str(token1.address)],
        )

    def add_liquidity(self, params: AddLiquidityParameters) -> EntryFunctionPayload:
        return EntryFunctionPayload(
            function=self._function("add_liquidity"),
            function_arguments=[
                params.token_a,
                params.token_b,
                params.amount_a,
                params.amount_b,
                params.min_amount_a,
                params.min_amount_b,
                str(params.fee),
            ],
        )

    def remove_liquidity(self, params: RemoveLiquidityParameters) -> EntryFunctionPayload:
        return EntryFunctionPayload(
            function=self._function("remove_liquidity"),
            function_arguments=[
                params.token_a,
                params.token_b,
                params.amount,
                params.min_amount_a,
                params.min_amount_b,
            ],
        )

    def swap(self, params: SwapParameters) -> EntryFunctionPayload:
        if params.trade_type is TradeType.EXACT_INPUT:
            # amount_out is the slippage-bounded minimum
            return EntryFunctionPayload(
                function=self._function("swap_exact_input"),
                function_arguments=[params.amount_in, params.amount_out, list(params.path)],
            )
        # amount_in is the slippage-bounded maximum
        return EntryFunctionPayload(
            function=self._function("swap_exact_output"),
            function_arguments=[params.amount_out, params.amount_in, list(params.path)],
        )
