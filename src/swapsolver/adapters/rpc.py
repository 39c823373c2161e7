"""Minimal JSON-RPC 2.0 client over httpx.

Transport failures (connection errors, timeouts, non-200 responses, bodies
that are not JSON-RPC) become RPCUnavailable here. A JSON-RPC ``error``
object is a valid answer from the node and is returned to the caller, which
decides what it means.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from swapsolver.errors import RPCUnavailable, Stage

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

_request_ids = itertools.count(1)


@dataclass
class RpcResponse:
    """Decoded JSON-RPC response."""

    result: Any = None
    error: Optional[dict] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_message(self) -> str:
        """Node error message, verbatim."""
        if self.error is None:
            return ""
        if isinstance(self.error, dict):
            return str(self.error.get("message", self.error))
        return str(self.error)


class JsonRpcClient:
    """JSON-RPC client bound to one chain node.

    Args:
        url: Node endpoint
        chain: Chain tag used when tagging errors
        timeout: Default timeout in seconds for each call
        client: Shared AsyncClient; when omitted a client is opened per call
    """

    def __init__(
        self,
        url: str,
        chain: str,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.chain = chain
        self.timeout = timeout
        self._client = client

    async def call(
        self,
        method: str,
        params: Optional[list] = None,
        *,
        stage: Stage,
        timeout: Optional[float] = None,
    ) -> RpcResponse:
        """Send one JSON-RPC request.

        Raises:
            RPCUnavailable: the node could not be reached or answered garbage
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(_request_ids),
            "method": method,
            "params": params or [],
        }
        timeout = self.timeout if timeout is None else timeout

        try:
            if self._client is not None:
                response = await self._client.post(self.url, json=payload, timeout=timeout)
            else:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await client.post(self.url, json=payload)
        except httpx.TimeoutException as e:
            raise RPCUnavailable(
                f"{method} timed out after {timeout}s: {e}", chain=self.chain, stage=stage
            )
        except httpx.HTTPError as e:
            raise RPCUnavailable(
                f"{method} failed: {type(e).__name__}: {e}", chain=self.chain, stage=stage
            )

        if response.status_code != 200:
            raise RPCUnavailable(
                f"{method} returned HTTP {response.status_code}: {response.text[:200]}",
                chain=self.chain,
                stage=stage,
            )

        try:
            data = response.json()
        except ValueError:
            raise RPCUnavailable(
                f"{method} returned a non-JSON body", chain=self.chain, stage=stage
            )

        if not isinstance(data, dict) or ("result" not in data and "error" not in data):
            raise RPCUnavailable(
                f"{method} returned a malformed JSON-RPC response", chain=self.chain, stage=stage
            )

        if data.get("error") is not None:
            logger.debug(f"{self.chain} {method} error: {data['error']}")
            return RpcResponse(error=data["error"])
        return RpcResponse(result=data.get("result"))

    async def result(
        self,
        method: str,
        params: Optional[list] = None,
        *,
        stage: Stage,
        timeout: Optional[float] = None,
    ) -> Any:
        """Send a request where any node error means the node is unusable."""
        response = await self.call(method, params, stage=stage, timeout=timeout)
        if not response.ok:
            raise RPCUnavailable(
                f"{method} error: {response.error_message}", chain=self.chain, stage=stage
            )
        return response.result


def parse_hex_int(value: Optional[str], field: str = "value") -> Optional[int]:
    """Parse a 0x-prefixed quantity; None stays None."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    try:
        return int(value, 16)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid hex quantity for {field}: {value!r}")
