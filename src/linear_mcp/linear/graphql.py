"""Async GraphQL executor for the Linear API.

Issues exactly one POST per call. There is no retry and no timeout beyond
whatever the underlying httpx client is configured with.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from ..config import DEFAULT_LINEAR_API_URL
from .exceptions import GraphQLError, HTTPStatusError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = DEFAULT_LINEAR_API_URL


@dataclass
class GraphQLResponse:
    """Decoded ``{data, errors}`` body."""

    data: Dict[str, Any] = field(default_factory=dict)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def error_messages(self) -> List[str]:
        messages = []
        for error in self.errors:
            if isinstance(error, dict):
                messages.append(str(error.get("message", "Unknown error")))
            else:
                messages.append(str(error))
        return messages


class GraphQLClient:
    """Sends GraphQL documents to Linear with the raw API key."""

    def __init__(
        self,
        api_key: str,
        endpoint: str = DEFAULT_API_URL,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.endpoint = endpoint
        self._http_client = http_client

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client

        from ..http_client import get_http_client

        return get_http_client()

    async def execute(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        operation: str = "",
    ) -> GraphQLResponse:
        """Execute a single GraphQL document.

        Args:
            query: GraphQL query or mutation text.
            variables: Optional query variables.
            operation: Name used to give errors and log lines context.

        Returns:
            The decoded response. ``data`` is always a dict.

        Raises:
            TransportError: The request could not be built or sent, or the body
                is not JSON.
            HTTPStatusError: Non-OK status with a body that is not JSON.
            GraphQLError: The body carries GraphQL errors (partial response attached).
        """
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        headers = {
            "Authorization": self.api_key,
            "Content-Type": "application/json",
        }

        logger.debug("GraphQL request: %s", operation or "<anonymous>")
        try:
            response = await self.http_client.post(
                self.endpoint, json=payload, headers=headers
            )
        except (httpx.HTTPError, httpx.InvalidURL, TypeError, ValueError) as exc:
            # Covers both building the request (bad URL, unserialisable
            # variables) and sending it.
            raise TransportError(
                f"failed to make request: {exc}", operation
            ) from exc

        result = self._decode(response, operation)

        if result.errors:
            messages = result.error_messages
            logger.warning(
                "GraphQL errors for %s: %s", operation or "<anonymous>", "; ".join(messages)
            )
            raise GraphQLError(messages, response=result, operation=operation)

        return result

    @staticmethod
    def _decode(response: httpx.Response, operation: str) -> GraphQLResponse:
        try:
            body = response.json()
            if not isinstance(body, dict):
                raise ValueError(f"expected a JSON object, got {type(body).__name__}")
            data = body.get("data") or {}
            errors = body.get("errors") or []
            if not isinstance(data, dict) or not isinstance(errors, list):
                raise ValueError("unexpected shape for 'data' or 'errors'")
        except ValueError as exc:
            if response.status_code != httpx.codes.OK:
                raise HTTPStatusError(
                    f"received non-OK response: {response.status_code} {response.reason_phrase}".rstrip(),
                    status_code=response.status_code,
                    operation=operation,
                ) from exc
            raise TransportError(
                f"failed to decode response: {exc}", operation
            ) from exc

        return GraphQLResponse(data=data, errors=errors)
