from __future__ import annotations

from typing import Optional, Sequence

from core.base_types import Price, Token
from core.errors import RouteContinuityError, RouteEndpointError, TokenMismatchError

from .pair import Pair


class Route:
    """Represents a swap route through one or more pools."""

    def __init__(
        self,
        pairs: Sequence[Pair],
        input_token: Token,
        output_token: Optional[Token] = None,
    ):
        pairs = tuple(pairs)
        if not pairs:
            raise ValueError("route needs at least one pair")
        chain_id = pairs[0].chain_id
        if any(pair.chain_id != chain_id for pair in pairs):
            raise TokenMismatchError("all pairs must be on the same chain")
        if input_token.chain_id != chain_id:
            raise TokenMismatchError("input token is on a different chain")
        if not pairs[0].involves_token(input_token):
            raise RouteEndpointError(f"first pair does not involve {input_token}")
        if output_token is not None and not pairs[-1].involves_token(output_token):
            raise RouteEndpointError(f"last pair does not involve {output_token}")

        path = [input_token]
        for idx, pair in enumerate(pairs):
            current = path[-1]
            if not pair.involves_token(current):
                raise RouteContinuityError(f"hop {idx} does not involve {current}")
            path.append(pair.other_token(current))

        if output_token is not None and path[-1] != output_token:
            raise RouteEndpointError(f"route ends at {path[-1]}, not {output_token}")

        self._pairs = pairs
        self._path = tuple(path)  # token_in -> intermediate... -> token_out

    @property
    def pairs(self) -> tuple[Pair, ...]:
        return self._pairs

    @property
    def path(self) -> tuple[Token, ...]:
        return self._path

    @property
    def input(self) -> Token:
        return self._path[0]

    @property
    def output(self) -> Token:
        return self._path[-1]

    @property
    def num_hops(self) -> int:
        return len(self._pairs)

    @property
    def chain_id(self) -> int:
        return self._pairs[0].chain_id

    @property
    def mid_price(self) -> Price:
        """Product of each hop's spot price, input token priced in output token."""
        price = self._pairs[0].price_of(self._path[0])
        for pair, token in zip(self._pairs[1:], self._path[1:-1]):
            price = price.multiply(pair.price_of(token))
        return Price(self.input, self.output, price.denominator, price.numerator)

    def __repr__(self) -> str:
        return f"Route({' -> '.join(str(token) for token in self._path)})"
