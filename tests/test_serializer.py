import pytest

from core.base_types import Address, CurrencyAmount, Token
from core.fraction import Percent
from core.serializer import CanonicalSerializer
from pricing.router import SwapParameters
from pricing.trade import TradeType

TOKEN = Token(126, "0xa", 6, "A")
LONG_A = "0x" + "0" * 63 + "a"


def test_nested_objects_sorted_keys():
    obj = {"b": 1, "a": {"d": 4, "c": 3}}
    serialized = CanonicalSerializer.serialize(obj)
    assert serialized == b'{"a":{"c":3,"d":4},"b":1}'


def test_unicode_strings():
    obj = {"word": "Привіт"}
    serialized = CanonicalSerializer.serialize(obj)
    assert b'"word":"\xd0\x9f\xd1\x80\xd0\xb8\xd0\xb2\xd1\x96\xd1\x82"' in serialized


def test_none_values_and_empty_containers():
    assert CanonicalSerializer.serialize({"value": None}) == b'{"value":null}'
    assert CanonicalSerializer.serialize({}) == b"{}"
    assert CanonicalSerializer.serialize(()) == b"[]"


def test_floats_are_rejected():
    with pytest.raises(ValueError, match="Floating point"):
        CanonicalSerializer.serialize({"value": 1.23})


def test_non_string_keys_rejected():
    with pytest.raises(TypeError):
        CanonicalSerializer.serialize({1: "a"})


def test_dataclass_with_enum_and_tuple():
    params = SwapParameters(
        amount_in="100",
        amount_out="95",
        path=(LONG_A, "0x1"),
        trade_type=TradeType.EXACT_INPUT,
    )
    assert CanonicalSerializer.serialize(params) == (
        b'{"amount_in":"100","amount_out":"95",'
        b'"path":["' + LONG_A.encode() + b'","0x1"],"trade_type":"exact_input"}'
    )


def test_domain_values():
    plain = CanonicalSerializer.to_plain(
        {
            "token": TOKEN,
            "address": Address("0x1::coin::T"),
            "amount": CurrencyAmount.from_raw_amount(TOKEN, 2**63),
            "impact": Percent(1, 3),
        }
    )
    assert plain == {
        "token": LONG_A,
        "address": "0x1::coin::T",
        "amount": str(2**63),
        "impact": {"numerator": "1", "denominator": "3"},
    }


def test_unsupported_type():
    with pytest.raises(TypeError):
        CanonicalSerializer.serialize({"value": object()})
