"""Ledger-side exceptions for REST and view-function failures."""

from __future__ import annotations

from typing import Optional


class ChainError(Exception):
    """Base class for chain errors."""


class RPCError(ChainError):
    """Node rejected the request."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        error_code: Optional[str] = None,
        vm_error_code: Optional[int] = None,
    ):
        self.status = status
        self.error_code = error_code
        self.vm_error_code = vm_error_code
        super().__init__(message)


class ResourceNotFound(RPCError):
    """Account, module or resource does not exist on the ledger."""


class ViewFunctionAborted(RPCError):
    """View function aborted or failed inside the VM."""


class PoolNotFoundError(ChainError):
    """No pool exists for the token pair."""


class MalformedResponseError(ChainError):
    """Ledger response does not have the expected shape."""
