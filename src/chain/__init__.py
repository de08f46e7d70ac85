from .client import LedgerClient
from .errors import (
    ChainError,
    MalformedResponseError,
    PoolNotFoundError,
    ResourceNotFound,
    RPCError,
    ViewFunctionAborted,
)
from .payloads import EntryFunctionPayload, PayloadBuilder
from .reader import LedgerPoolReader, PoolReader, StaticPoolReader

__all__ = [
    "LedgerClient",
    "PoolReader",
    "LedgerPoolReader",
    "StaticPoolReader",
    "EntryFunctionPayload",
    "PayloadBuilder",
    "ChainError",
    "RPCError",
    "ResourceNotFound",
    "ViewFunctionAborted",
    "PoolNotFoundError",
    "MalformedResponseError",
]
