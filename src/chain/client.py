"""Aptos-compatible ledger REST client with retries and error classification."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Optional

import requests

from .errors import ChainError, ResourceNotFound, RPCError, ViewFunctionAborted

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {
    "account_not_found",
    "module_not_found",
    "resource_not_found",
    "struct_field_not_found",
}
_VM_ERROR_CODES = {"vm_error", "invalid_input"}


class LedgerClient:
    """
    Ledger REST client with reliability features.

    Features:
    - Automatic retry with exponential backoff
    - Multiple node endpoint fallback
    - Request timing/logging
    - Proper error classification
    """

    def __init__(
        self,
        node_urls: list[str],
        timeout: int = 30,
        max_retries: int = 3,
    ):
        if not node_urls:
            raise ValueError("node_urls must not be empty")
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self._node_urls = [url.rstrip("/") for url in node_urls]
        self._timeout = timeout
        self._max_retries = max_retries
        self._session = requests.Session()

    def get_ledger_info(self) -> dict:
        return self._request("GET", "")

    def get_chain_id(self) -> int:
        info = self.get_ledger_info()
        try:
            return int(info["chain_id"])
        except (KeyError, TypeError, ValueError) as exc:
            raise RPCError("ledger info has no chain_id") from exc

    def get_account_resource(self, address: str, resource_type: str) -> dict:
        return self._request("GET", f"/accounts/{address}/resource/{resource_type}")

    def view(
        self,
        function: str,
        arguments: list[Any],
        type_arguments: Optional[list[str]] = None,
    ) -> list[Any]:
        payload = {
            "function": function,
            "type_arguments": list(type_arguments or []),
            "arguments": arguments,
        }
        result = self._request("POST", "/view", payload)
        if not isinstance(result, list):
            raise RPCError(f"view {function} returned {type(result).__name__}")
        return result

    def _request(
        self, method: str, path: str, payload: Optional[dict] = None
    ) -> Any:
        last_error: Optional[Exception] = None
        for url in self._node_urls:
            for attempt in range(self._max_retries):
                start = time.perf_counter()
                try:
                    response = self._session.request(
                        method,
                        f"{url}{path}",
                        json=payload,
                        timeout=self._timeout,
                    )
                    elapsed = time.perf_counter() - start
                    logger.info("rest %s %s%s in %.3fs", method, url, path, elapsed)
                    if response.status_code == 429 or response.status_code >= 500:
                        last_error = RPCError(
                            f"HTTP {response.status_code} from {url}",
                            status=response.status_code,
                        )
                        logger.warning(
                            "retrying %s%s after HTTP %s (attempt %d)",
                            url,
                            path,
                            response.status_code,
                            attempt + 1,
                        )
                        self._sleep_backoff(attempt)
                        continue
                    if response.status_code >= 400:
                        self._raise_api_error(response)
                    return response.json()
                except (requests.Timeout, requests.ConnectionError) as exc:
                    last_error = exc
                    logger.warning(
                        "retrying %s%s after %s (attempt %d)",
                        url,
                        path,
                        type(exc).__name__,
                        attempt + 1,
                    )
                    self._sleep_backoff(attempt)
                except RPCError:
                    raise
                except json.JSONDecodeError as exc:
                    last_error = exc
                    self._sleep_backoff(attempt)
        raise ChainError("ledger request failed") from last_error

    def _sleep_backoff(self, attempt: int) -> None:
        delay = 0.5 * (2**attempt)
        time.sleep(delay)

    def _raise_api_error(self, response: requests.Response) -> None:
        status = response.status_code
        try:
            error = response.json()
        except json.JSONDecodeError:
            error = {}
        if not isinstance(error, dict):
            error = {}
        message = str(error.get("message") or f"HTTP {status}")
        error_code = error.get("error_code")
        vm_error_code = error.get("vm_error_code")
        if error_code in _NOT_FOUND_CODES or status == 404:
            raise ResourceNotFound(
                message, status=status, error_code=error_code, vm_error_code=vm_error_code
            )
        if error_code in _VM_ERROR_CODES or vm_error_code is not None:
            raise ViewFunctionAborted(
                message, status=status, error_code=error_code, vm_error_code=vm_error_code
            )
        raise RPCError(
            message, status=status, error_code=error_code, vm_error_code=vm_error_code
        )
