"""Canonical serialization for deterministic command output."""

from __future__ import annotations

import dataclasses
import json
from enum import Enum
from typing import Any

from .base_types import Address, CurrencyAmount, Token
from .fraction import Fraction


def _to_plain(obj: Any) -> Any:
    if isinstance(obj, float):
        raise ValueError("Floating point values are not allowed")

    if isinstance(obj, Enum):
        return _to_plain(obj.value)

    if isinstance(obj, (Token, Address)):
        return str(obj.address if isinstance(obj, Token) else obj)

    if isinstance(obj, CurrencyAmount):
        return str(obj.quotient)

    if isinstance(obj, Fraction):
        return {"numerator": str(obj.numerator), "denominator": str(obj.denominator)}

    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: _to_plain(getattr(obj, f.name)) for f in dataclasses.fields(obj)
        }

    if isinstance(obj, dict):
        plain = {}
        for key, value in obj.items():
            if not isinstance(key, str):
                raise TypeError("All dictionary keys must be strings")
            plain[key] = _to_plain(value)
        return plain

    if isinstance(obj, (list, tuple)):
        return [_to_plain(item) for item in obj]

    if obj is None or isinstance(obj, (str, int, bool)):
        return obj

    raise TypeError(f"Unsupported type for serialization: {type(obj).__name__}")


class CanonicalSerializer:
    """
    Produces deterministic JSON.

    Rules:
    - Keys sorted alphabetically (recursive)
    - No whitespace
    - Dataclasses as objects, enums as their values, tokens as addresses
    - Consistent unicode handling
    """

    @staticmethod
    def to_plain(obj: Any) -> Any:
        return _to_plain(obj)

    @staticmethod
    def serialize(obj: Any) -> bytes:
        """Returns canonical bytes representation."""
        payload = json.dumps(
            _to_plain(obj),
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
        )
        return payload.encode("utf-8")
