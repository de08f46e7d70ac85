import json

import pytest
import requests

from chain.client import LedgerClient
from chain.errors import ChainError, ResourceNotFound, RPCError, ViewFunctionAborted


class _Response:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch):
    monkeypatch.setattr("chain.client.time.sleep", lambda *_: None)


def test_view_posts_payload(monkeypatch):
    seen = {}

    def fake_request(method, url, json=None, timeout=None):
        seen.update(method=method, url=url, json=json, timeout=timeout)
        return _Response(["100", "200"])

    client = LedgerClient(["https://node.example/v1/"], timeout=5)
    monkeypatch.setattr(client._session, "request", fake_request)

    result = client.view("0x1::swap::token_reserves", ["0xa", "0xb"])
    assert result == ["100", "200"]
    assert seen["method"] == "POST"
    assert seen["url"] == "https://node.example/v1/view"
    assert seen["timeout"] == 5
    assert seen["json"] == {
        "function": "0x1::swap::token_reserves",
        "type_arguments": [],
        "arguments": ["0xa", "0xb"],
    }


def test_retries_timeout_then_success(monkeypatch):
    calls = {"count": 0}

    def fake_request(*args, **kwargs):
        calls["count"] += 1
        if calls["count"] == 1:
            raise requests.Timeout("boom")
        return _Response(["1"])

    client = LedgerClient(["https://node.example/v1"], max_retries=2)
    monkeypatch.setattr(client._session, "request", fake_request)

    assert client.view("0x1::m::f", []) == ["1"]
    assert calls["count"] == 2


def test_retries_server_errors_and_falls_back(monkeypatch):
    urls = []

    def fake_request(method, url, **kwargs):
        urls.append(url)
        if url.startswith("https://bad.example"):
            return _Response({"message": "unavailable"}, status_code=503)
        return _Response({"chain_id": 126})

    client = LedgerClient(
        ["https://bad.example/v1", "https://good.example/v1"], max_retries=2
    )
    monkeypatch.setattr(client._session, "request", fake_request)

    assert client.get_chain_id() == 126
    assert urls == [
        "https://bad.example/v1",
        "https://bad.example/v1",
        "https://good.example/v1",
    ]


def test_exhausted_retries_raise_chain_error(monkeypatch):
    def fake_request(*args, **kwargs):
        raise requests.ConnectionError("down")

    client = LedgerClient(["https://node.example/v1"], max_retries=3)
    monkeypatch.setattr(client._session, "request", fake_request)

    with pytest.raises(ChainError) as exc:
        client.get_ledger_info()
    assert isinstance(exc.value.__cause__, requests.ConnectionError)


def test_rate_limit_retried(monkeypatch):
    responses = [_Response({}, status_code=429), _Response({"chain_id": "250"})]

    def fake_request(*args, **kwargs):
        return responses.pop(0)

    client = LedgerClient(["https://node.example/v1"], max_retries=2)
    monkeypatch.setattr(client._session, "request", fake_request)

    assert client.get_chain_id() == 250


def test_invalid_json_retried(monkeypatch):
    responses = [
        _Response(json.JSONDecodeError("bad", "", 0)),
        _Response(["7"]),
    ]

    def fake_request(*args, **kwargs):
        return responses.pop(0)

    client = LedgerClient(["https://node.example/v1"], max_retries=2)
    monkeypatch.setattr(client._session, "request", fake_request)

    assert client.view("0x1::m::f", []) == ["7"]


def test_not_found_classified(monkeypatch):
    def fake_request(*args, **kwargs):
        return _Response(
            {"message": "Module not found", "error_code": "module_not_found"},
            status_code=404,
        )

    client = LedgerClient(["https://node.example/v1"])
    monkeypatch.setattr(client._session, "request", fake_request)

    with pytest.raises(ResourceNotFound) as exc:
        client.view("0x1::missing::f", [])
    assert exc.value.status == 404
    assert exc.value.error_code == "module_not_found"


def test_vm_abort_classified_without_retry(monkeypatch):
    calls = {"count": 0}

    def fake_request(*args, **kwargs):
        calls["count"] += 1
        return _Response(
            {
                "message": "Move abort: 0x1",
                "error_code": "vm_error",
                "vm_error_code": 4016,
            },
            status_code=400,
        )

    client = LedgerClient(["https://node.example/v1"], max_retries=3)
    monkeypatch.setattr(client._session, "request", fake_request)

    with pytest.raises(ViewFunctionAborted) as exc:
        client.view("0x1::swap::token_reserves", ["0xa", "0xb"])
    assert exc.value.vm_error_code == 4016
    assert calls["count"] == 1


def test_view_requires_list_result(monkeypatch):
    client = LedgerClient(["https://node.example/v1"])
    monkeypatch.setattr(
        client._session, "request", lambda *args, **kwargs: _Response({"oops": 1})
    )
    with pytest.raises(RPCError):
        client.view("0x1::m::f", [])


def test_client_requires_urls():
    with pytest.raises(ValueError):
        LedgerClient([])


def test_chain_id_and_account_resource(monkeypatch):
    seen = []

    def fake_request(method, url, json=None, timeout=None):
        seen.append((method, url))
        if url.endswith("/v1"):
            return _Response({"chain_id": 126, "ledger_version": "42"})
        return _Response({"type": "0x1::account::Account", "data": {}})

    client = LedgerClient(["https://node.example/v1"])
    monkeypatch.setattr(client._session, "request", fake_request)

    assert client.get_chain_id() == 126
    resource = client.get_account_resource("0x1", "0x1::account::Account")
    assert resource["type"] == "0x1::account::Account"
    assert seen == [
        ("GET", "https://node.example/v1"),
        ("GET", "https://node.example/v1/accounts/0x1/resource/0x1::account::Account"),
    ]
