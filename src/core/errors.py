"""Pricing exceptions raised by the AMM math, routing and router layers."""

from __future__ import annotations


class PricingError(Exception):
    """Base class for pricing errors."""


class InsufficientReservesError(PricingError):
    """A reserve is empty or the requested output would drain it."""

    def __init__(self, message: str = "insufficient reserves"):
        super().__init__(message)


class InsufficientInputAmountError(PricingError):
    """Computed output or minted liquidity is not strictly positive."""

    def __init__(self, message: str = "insufficient input amount"):
        super().__init__(message)


class TokenMismatchError(PricingError, ValueError):
    """Amount or token does not belong to the pair, route or trade."""


class RouteContinuityError(PricingError):
    """Adjacent pairs in a route share no token."""


class RouteEndpointError(RouteContinuityError):
    """First or last pair does not touch the declared input or output."""


class InvalidSlippageError(PricingError, ValueError):
    """Slippage tolerance outside [0, 100%)."""


class DivisionByZeroError(PricingError, ZeroDivisionError):
    """Fraction constructed with a zero denominator."""

    def __init__(self, message: str = "denominator must be non-zero"):
        super().__init__(message)


class ReserveOverflowError(PricingError):
    """A swap would push a reserve or amount past the u64 maximum."""

    def __init__(self, message: str = "amount exceeds u64 maximum"):
        super().__init__(message)
