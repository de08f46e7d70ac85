from __future__ import annotations

from typing import TYPE_CHECKING

from core.constants import DEFAULT_FEE_BPS, FEE_PRECISION

if TYPE_CHECKING:
    from .pair import Pair


def validate_fee_bps(fee_bps: int, allow_full: bool = False) -> int:
    if not isinstance(fee_bps, int) or isinstance(fee_bps, bool):
        raise TypeError("fee_bps must be int")
    upper = FEE_PRECISION if allow_full else FEE_PRECISION - 1
    if fee_bps < 0 or fee_bps > upper:
        raise ValueError(f"fee_bps must be in [0, {upper}]")
    return fee_bps


def get_effective_fee(fee_bps: int) -> int:
    """
    Fee numerator over FEE_PRECISION for a pool fee in basis points.

    25 bps -> 9975, i.e. 99.75% of the input takes part in the swap.
    """
    return FEE_PRECISION - validate_fee_bps(fee_bps)


def validate_fee_numerator(fee: int) -> int:
    if not isinstance(fee, int) or isinstance(fee, bool):
        raise TypeError("fee must be int")
    if fee <= 0 or fee > FEE_PRECISION:
        raise ValueError(f"fee must be in [1, {FEE_PRECISION}]")
    return fee


def get_pair_fee(pair: "Pair") -> int:
    """Pool fee in basis points, falling back to the protocol default."""
    if pair.fee_bps is None:
        return DEFAULT_FEE_BPS
    return pair.fee_bps
