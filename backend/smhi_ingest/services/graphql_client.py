"""
GraphQL Client
==============

Tiny async client for the AppSync-style backend that owns devices and
telemetry.

Every call is a POST with the API key in the x-api-key header:

    POST {api_endpoint}
    x-api-key: <key>
    Content-Type: application/json

    {"query": "...", "variables": {...}}

The backend answers {"data": ..., "errors": [...]}. A non-empty "errors"
list becomes a BackendValidationError carrying that list as-is.
"""

import logging
from typing import Any, Optional

import httpx

from smhi_ingest.exceptions import BackendValidationError

logger = logging.getLogger(__name__)


class GraphQLClient:
    """Sends queries and mutations to the backend."""

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        request_timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.endpoint = endpoint
        self._api_key = api_key
        self.http_client = http_client or httpx.AsyncClient(timeout=request_timeout)

    @property
    def headers(self) -> dict[str, str]:
        return {
            "x-api-key": self._api_key,
            "Content-Type": "application/json"
        }

    async def execute(
        self,
        query: str,
        variables: Optional[dict[str, Any]] = None,
        operation: str = ""
    ) -> dict[str, Any]:
        """
        Run one query or mutation.

        Args:
            query: GraphQL document
            variables: Values for the document's variables
            operation: Name used in logs and errors

        Returns:
            The "data" object of the response ({} if the backend sent null)

        Raises:
            BackendValidationError: The backend returned an errors list
            httpx.HTTPError: Network trouble, or an HTTP error without a GraphQL body
        """
        logger.debug(f"[GraphQL] {operation} -> {self.endpoint} variables={variables}")

        response = await self.http_client.post(
            self.endpoint,
            headers=self.headers,
            json={"query": query, "variables": variables or {}}
        )

        try:
            body = response.json()
        except ValueError:
            # Not GraphQL at all - let the status code speak
            response.raise_for_status()
            raise

        if isinstance(body, dict) and body.get("errors"):
            logger.warning(f"[GraphQL] {operation} returned errors: {body['errors']}")
            raise BackendValidationError(body["errors"], operation=operation)

        response.raise_for_status()

        if not isinstance(body, dict):
            raise ValueError(f"{operation} response is not a JSON object")
        return body.get("data") or {}

    async def close(self):
        """Close the HTTP client. Called on shutdown."""
        await self.http_client.aclose()
