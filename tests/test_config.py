import pytest

import config

_VARS = (
    "APTOS_NODE_URLS",
    "SWAP_ADDRESS",
    "CHAIN_ID",
    "RPC_TIMEOUT",
    "RPC_MAX_RETRIES",
    "LOG_LEVEL",
    "DEFAULT_SLIPPAGE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.setattr(config, "_ENV_LOADED", True)
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = config.load_settings()
    assert settings.node_urls == (config.DEFAULT_NODE_URL,)
    assert settings.swap_address is None
    assert settings.chain_id == 126
    assert settings.rpc_timeout == 30
    assert settings.rpc_max_retries == 3
    assert settings.log_level == "WARNING"
    assert settings.default_slippage == "0.5"


def test_overrides(monkeypatch):
    monkeypatch.setenv("APTOS_NODE_URLS", "https://a.example/v1, https://b.example/v1,")
    monkeypatch.setenv("CHAIN_ID", "250")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = config.load_settings()
    assert settings.node_urls == ("https://a.example/v1", "https://b.example/v1")
    assert settings.chain_id == 250
    assert settings.log_level == "DEBUG"


def test_bad_integer_exits(monkeypatch):
    monkeypatch.setenv("RPC_TIMEOUT", "soon")
    with pytest.raises(SystemExit):
        config.load_settings()


def test_required_variable(monkeypatch):
    with pytest.raises(SystemExit):
        config.get_env("SWAP_ADDRESS", required=True)
    monkeypatch.setenv("SWAP_ADDRESS", "0x5")
    assert config.get_env("SWAP_ADDRESS", required=True) == "0x5"


def test_unknown_log_level_exits(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(SystemExit):
        config.load_settings()
