import importlib
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from core.constants import ChainId

_ENV_LOADED = False

DEFAULT_NODE_URL = "https://mainnet.movementnetwork.xyz/v1"


def _load_env() -> None:
    global _ENV_LOADED
    if _ENV_LOADED:
        return
    try:
        dotenv = importlib.import_module("dotenv")
    except ImportError as exc:
        raise SystemExit("python-dotenv is required (pip install -e .)") from exc
    env_path = Path(__file__).resolve().parents[1] / ".env"
    dotenv.load_dotenv(dotenv_path=env_path)
    _ENV_LOADED = True


def get_env(
    name: str, default: str | None = None, required: bool = False
) -> str | None:
    _load_env()
    value = os.environ.get(name, default)
    if required and (value is None or value == ""):
        raise SystemExit(f"{name} env var is required")
    return value


def _get_int(name: str, default: int) -> int:
    value = get_env(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise SystemExit(f"{name} must be an integer, got {value!r}") from exc


def _get_log_level(name: str, default: str) -> str:
    value = (get_env(name) or default).upper()
    if not isinstance(logging.getLevelName(value), int):
        raise SystemExit(f"{name} must be a logging level name, got {value!r}")
    return value


@dataclass(frozen=True)
class Settings:
    node_urls: tuple[str, ...]
    swap_address: str | None
    chain_id: int
    rpc_timeout: int
    rpc_max_retries: int
    log_level: str
    default_slippage: str


def load_settings() -> Settings:
    urls = get_env("APTOS_NODE_URLS") or DEFAULT_NODE_URL
    return Settings(
        node_urls=tuple(url.strip() for url in urls.split(",") if url.strip()),
        swap_address=get_env("SWAP_ADDRESS") or None,
        chain_id=_get_int("CHAIN_ID", int(ChainId.MOVE_MAINNET)),
        rpc_timeout=_get_int("RPC_TIMEOUT", 30),
        rpc_max_retries=_get_int("RPC_MAX_RETRIES", 3),
        log_level=_get_log_level("LOG_LEVEL", "WARNING"),
        default_slippage=get_env("DEFAULT_SLIPPAGE") or "0.5",
    )
