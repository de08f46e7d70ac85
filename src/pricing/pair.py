from __future__ import annotations

from math import isqrt
from typing import Optional

from core.base_types import Address, CurrencyAmount, Price, Token
from core.constants import (
    FEE_PRECISION,
    LP_TOKEN_DECIMALS,
    LP_TOKEN_SYMBOL,
    MAX_U64,
    MINIMUM_LIQUIDITY,
    NULL_ADDRESS,
    pair_lp_type_tag,
    pair_reserve_type_tag,
)
from core.errors import (
    InsufficientInputAmountError,
    InsufficientReservesError,
    ReserveOverflowError,
    TokenMismatchError,
)

from .fees import get_effective_fee, get_pair_fee, validate_fee_numerator


class Pair:
    """
    A constant-product liquidity pool at a point in time.
    All math uses integers only, no floats anywhere.

    Reserves are stored in canonical (token0, token1) order whatever order
    the amounts were given in. Instances are never mutated: swap helpers
    return a new Pair with the post-trade reserves.
    """

    def __init__(
        self,
        amount_a: CurrencyAmount,
        amount_b: CurrencyAmount,
        fee_bps: Optional[int] = None,
        liquidity_address: Address | str | None = None,
        swap_address: Address | str = NULL_ADDRESS,
    ):
        if not isinstance(amount_a, CurrencyAmount) or not isinstance(
            amount_b, CurrencyAmount
        ):
            raise TypeError("reserves must be CurrencyAmount")
        if amount_a.token.chain_id != amount_b.token.chain_id:
            raise TokenMismatchError("pair tokens must be on the same chain")
        if amount_a.token == amount_b.token:
            raise TokenMismatchError("pair tokens must be different")
        for amount in (amount_a, amount_b):
            if amount.denominator != 1:
                raise ValueError("reserves must be raw integer amounts")
            if amount.quotient < 0:
                raise ValueError("reserves must be non-negative")
        if fee_bps is not None:
            get_effective_fee(fee_bps)

        if amount_a.token.sorts_before(amount_b.token):
            reserves = (amount_a, amount_b)
        else:
            reserves = (amount_b, amount_a)

        self._reserves = reserves
        self._fee_bps = fee_bps
        self._liquidity_address = liquidity_address
        self._swap_address = swap_address
        self._liquidity_token = Pair.get_liquidity_token(
            reserves[0].token, reserves[1].token, liquidity_address, swap_address
        )

    @staticmethod
    def sort_tokens(token_a: Token, token_b: Token) -> tuple[Token, Token]:
        if token_a.sorts_before(token_b):
            return token_a, token_b
        return token_b, token_a

    @staticmethod
    def get_address(
        token_a: Token, token_b: Token, swap_address: Address | str = NULL_ADDRESS
    ) -> Address:
        token0, token1 = Pair.sort_tokens(token_a, token_b)
        return Address(
            f"{pair_lp_type_tag(str(swap_address))}<{token0.address}, {token1.address}>"
        )

    @staticmethod
    def get_reserves_address(
        token_a: Token, token_b: Token, swap_address: Address | str = NULL_ADDRESS
    ) -> Address:
        token0, token1 = Pair.sort_tokens(token_a, token_b)
        return Address(
            f"{pair_reserve_type_tag(str(swap_address))}"
            f"<{token0.address}, {token1.address}>"
        )

    @staticmethod
    def get_liquidity_token(
        token_a: Token,
        token_b: Token,
        liquidity_address: Address | str | None = None,
        swap_address: Address | str = NULL_ADDRESS,
    ) -> Token:
        token0, token1 = Pair.sort_tokens(token_a, token_b)
        if liquidity_address is None:
            address = Pair.get_address(token0, token1, swap_address)
        else:
            address = Address(str(liquidity_address))
        return Token(
            chain_id=token0.chain_id,
            address=address,
            decimals=LP_TOKEN_DECIMALS,
            symbol=LP_TOKEN_SYMBOL,
            name=f"Warpgate-{token0.symbol}-{token1.symbol}-LP",
        )

    @property
    def liquidity_token(self) -> Token:
        return self._liquidity_token

    @property
    def address(self) -> Address:
        return self._liquidity_token.address

    @property
    def token0(self) -> Token:
        return self._reserves[0].token

    @property
    def token1(self) -> Token:
        return self._reserves[1].token

    @property
    def reserve0(self) -> CurrencyAmount:
        return self._reserves[0]

    @property
    def reserve1(self) -> CurrencyAmount:
        return self._reserves[1]

    @property
    def chain_id(self) -> int:
        return self.token0.chain_id

    @property
    def fee_bps(self) -> Optional[int]:
        return self._fee_bps

    @property
    def fee_numerator(self) -> int:
        return get_effective_fee(get_pair_fee(self))

    @property
    def k(self) -> int:
        return self.reserve0.quotient * self.reserve1.quotient

    def involves_token(self, token: Token) -> bool:
        return token == self.token0 or token == self.token1

    def _require_token(self, token: Token) -> None:
        if not self.involves_token(token):
            raise TokenMismatchError(f"{token} not in pair")

    def other_token(self, token: Token) -> Token:
        self._require_token(token)
        return self.token1 if token == self.token0 else self.token0

    def reserve_of(self, token: Token) -> CurrencyAmount:
        self._require_token(token)
        return self.reserve0 if token == self.token0 else self.reserve1

    @property
    def token0_price(self) -> Price:
        """Mid price of token0 in token1 (reserve1 / reserve0)."""
        return Price(
            self.token0, self.token1, self.reserve0.quotient, self.reserve1.quotient
        )

    @property
    def token1_price(self) -> Price:
        """Mid price of token1 in token0 (reserve0 / reserve1)."""
        return Price(
            self.token1, self.token0, self.reserve1.quotient, self.reserve0.quotient
        )

    def price_of(self, token: Token) -> Price:
        self._require_token(token)
        return self.token0_price if token == self.token0 else self.token1_price

    def _resolve_fee(self, fee: Optional[int]) -> int:
        if fee is None:
            return self.fee_numerator
        return validate_fee_numerator(fee)

    def _has_empty_reserve(self) -> bool:
        return self.reserve0.quotient == 0 or self.reserve1.quotient == 0

    def _with_reserves(self, amount_a: CurrencyAmount, amount_b: CurrencyAmount) -> "Pair":
        return Pair(
            amount_a,
            amount_b,
            fee_bps=self._fee_bps,
            liquidity_address=self._liquidity_address,
            swap_address=self._swap_address,
        )

    def get_output_amount(
        self, input_amount: CurrencyAmount, fee: Optional[int] = None
    ) -> tuple[CurrencyAmount, "Pair"]:
        """
        Output for an exact input, and the pair after the swap.

        amount_in_with_fee = amount_in * fee
        amount_out = amount_in_with_fee * reserve_out
                     // (reserve_in * 10000 + amount_in_with_fee)
        """
        self._require_token(input_amount.token)
        if self._has_empty_reserve():
            raise InsufficientReservesError()
        fee_numerator = self._resolve_fee(fee)
        amount_in = input_amount.quotient
        if amount_in <= 0:
            raise InsufficientInputAmountError()

        input_reserve = self.reserve_of(input_amount.token)
        output_reserve = self.reserve_of(self.other_token(input_amount.token))

        amount_in_with_fee = amount_in * fee_numerator
        numerator = amount_in_with_fee * output_reserve.quotient
        denominator = input_reserve.quotient * FEE_PRECISION + amount_in_with_fee
        amount_out = numerator // denominator
        if amount_out == 0:
            raise InsufficientInputAmountError()
        if input_reserve.quotient + amount_in > MAX_U64:
            raise ReserveOverflowError(f"{input_reserve.token} reserve would exceed u64")

        output_amount = CurrencyAmount.from_raw_amount(output_reserve.token, amount_out)
        next_pair = self._with_reserves(
            CurrencyAmount.from_raw_amount(
                input_reserve.token, input_reserve.quotient + amount_in
            ),
            CurrencyAmount.from_raw_amount(
                output_reserve.token, output_reserve.quotient - amount_out
            ),
        )
        return output_amount, next_pair

    def get_input_amount(
        self, output_amount: CurrencyAmount, fee: Optional[int] = None
    ) -> tuple[CurrencyAmount, "Pair"]:
        """
        Minimal input that yields at least ``output_amount``, and the pair
        after the swap. (Inverse of get_output_amount, rounded against the
        trader by the trailing +1.)
        """
        self._require_token(output_amount.token)
        amount_out = output_amount.quotient
        if amount_out <= 0:
            raise ValueError("output amount must be positive")
        output_reserve = self.reserve_of(output_amount.token)
        if self._has_empty_reserve() or amount_out >= output_reserve.quotient:
            raise InsufficientReservesError()
        fee_numerator = self._resolve_fee(fee)
        input_reserve = self.reserve_of(self.other_token(output_amount.token))

        numerator = input_reserve.quotient * amount_out * FEE_PRECISION
        denominator = (output_reserve.quotient - amount_out) * fee_numerator
        amount_in = numerator // denominator + 1
        if input_reserve.quotient + amount_in > MAX_U64:
            raise ReserveOverflowError(f"{input_reserve.token} reserve would exceed u64")

        input_amount = CurrencyAmount.from_raw_amount(input_reserve.token, amount_in)
        next_pair = self._with_reserves(
            CurrencyAmount.from_raw_amount(
                input_reserve.token, input_reserve.quotient + amount_in
            ),
            CurrencyAmount.from_raw_amount(
                output_reserve.token, output_reserve.quotient - amount_out
            ),
        )
        return input_amount, next_pair

    def get_liquidity_minted(
        self,
        total_supply: CurrencyAmount,
        amount_a: CurrencyAmount,
        amount_b: CurrencyAmount,
    ) -> CurrencyAmount:
        """Liquidity tokens minted for depositing ``amount_a`` and ``amount_b``."""
        if total_supply.token != self._liquidity_token:
            raise TokenMismatchError("total supply must be in the liquidity token")
        if amount_a.token == amount_b.token:
            raise TokenMismatchError("deposit amounts must be in different tokens")
        if amount_a.token.sorts_before(amount_b.token):
            amount0, amount1 = amount_a, amount_b
        else:
            amount0, amount1 = amount_b, amount_a
        if amount0.token != self.token0 or amount1.token != self.token1:
            raise TokenMismatchError("deposit amounts must match the pair tokens")

        supply = total_supply.quotient
        if supply == 0:
            liquidity = isqrt(amount0.quotient * amount1.quotient) - MINIMUM_LIQUIDITY
        else:
            if self._has_empty_reserve():
                raise InsufficientReservesError()
            liquidity = min(
                amount0.quotient * supply // self.reserve0.quotient,
                amount1.quotient * supply // self.reserve1.quotient,
            )
        if liquidity <= 0:
            raise InsufficientInputAmountError()
        return CurrencyAmount.from_raw_amount(self._liquidity_token, liquidity)

    def get_liquidity_value(
        self,
        token: Token,
        total_supply: CurrencyAmount,
        liquidity: CurrencyAmount,
        fee_on: bool = False,
        k_last: Optional[int] = None,
    ) -> CurrencyAmount:
        """
        Amount of ``token`` redeemable for ``liquidity``.

        With the protocol fee switched on, the supply is first inflated by
        the fee share accrued since the last mint/burn (1/6 of the growth in
        sqrt(k), minted to the protocol on the next liquidity event).
        """
        self._require_token(token)
        if total_supply.token != self._liquidity_token:
            raise TokenMismatchError("total supply must be in the liquidity token")
        if liquidity.token != self._liquidity_token:
            raise TokenMismatchError("liquidity must be in the liquidity token")
        if liquidity.quotient > total_supply.quotient:
            raise ValueError("liquidity exceeds total supply")

        supply = total_supply.quotient
        if fee_on:
            if k_last is None:
                raise ValueError("k_last is required when fee_on is set")
            if k_last != 0:
                root_k = isqrt(self.k)
                root_k_last = isqrt(k_last)
                if root_k > root_k_last:
                    numerator = supply * (root_k - root_k_last)
                    denominator = root_k * 5 + root_k_last
                    supply += numerator // denominator
        if supply == 0:
            raise InsufficientReservesError("liquidity token supply is zero")

        return CurrencyAmount.from_raw_amount(
            token, liquidity.quotient * self.reserve_of(token).quotient // supply
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pair):
            return NotImplemented
        return (
            self._reserves == other._reserves
            and self._fee_bps == other._fee_bps
            and self._liquidity_token.address == other._liquidity_token.address
        )

    def __hash__(self) -> int:
        return hash((self._reserves, self._fee_bps, self._liquidity_token.address))

    def __repr__(self) -> str:
        return (
            f"Pair({self.token0}={self.reserve0.quotient}, "
            f"{self.token1}={self.reserve1.quotient}, fee_bps={self._fee_bps})"
        )
