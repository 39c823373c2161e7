"""GraphQL client for the solver application (pricing and pools)."""

import logging
from typing import Any, Optional

import httpx

from swapsolver.errors import RPCUnavailable, Stage

logger = logging.getLogger(__name__)


class GraphQLError(Exception):
    """The service answered with a GraphQL ``errors`` array."""


class GraphQLClient:
    """Thin GraphQL-over-HTTP client.

    Args:
        url: GraphQL endpoint
        timeout: Default timeout in seconds
        client: Shared AsyncClient; when omitted a client is opened per call
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.timeout = timeout
        self._client = client

    async def execute(
        self,
        query: str,
        variables: Optional[dict] = None,
        *,
        stage: Stage,
        timeout: Optional[float] = None,
    ) -> dict[str, Any]:
        """Run a query and return its ``data`` object.

        Raises:
            RPCUnavailable: transport failure or non-GraphQL response
            GraphQLError: service reported errors
        """
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables
        timeout = self.timeout if timeout is None else timeout

        try:
            if self._client is not None:
                response = await self._client.post(self.url, json=payload, timeout=timeout)
            else:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await client.post(self.url, json=payload)
        except httpx.HTTPError as e:
            raise RPCUnavailable(
                f"Solver service unreachable: {type(e).__name__}: {e}", stage=stage
            )

        if response.status_code != 200:
            raise RPCUnavailable(
                f"Solver service returned HTTP {response.status_code}: {response.text[:200]}",
                stage=stage,
            )

        try:
            data = response.json()
        except ValueError:
            raise RPCUnavailable("Solver service returned a non-JSON body", stage=stage)

        errors = data.get("errors") if isinstance(data, dict) else None
        if errors:
            message = errors[0].get("message", str(errors[0])) if isinstance(errors[0], dict) else str(errors[0])
            logger.warning(f"GraphQL error: {message}")
            raise GraphQLError(message)

        if not isinstance(data, dict) or not isinstance(data.get("data"), dict):
            raise RPCUnavailable("Solver service returned no data", stage=stage)
        return data["data"]
