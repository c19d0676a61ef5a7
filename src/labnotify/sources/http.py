"""
HTTP request source backed by httpx.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from labnotify.errors import TransportError
from labnotify.schema.request import Request
from labnotify.sources.base import RemoteRequestSource

logger = logging.getLogger(__name__)


class HttpRequestSource(RemoteRequestSource):
    """
    Reads ``GET {base_url}{path}?{owner_param}=<owner_id>``.

    The response must be a JSON array of request objects. A client can be
    injected (tests use httpx.MockTransport); otherwise one is created
    lazily and reused until close().
    """

    def __init__(
        self,
        base_url: str,
        path: str = "/requests",
        owner_param: str = "ownerId",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.path = path if path.startswith("/") else f"/{path}"
        self.owner_param = owner_param
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.path}"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def fetch_requests(self, owner_id: str) -> list[Request]:
        client = self._get_client()
        try:
            response = await client.get(
                self.url,
                params={self.owner_param: owner_id},
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise TransportError(f"GET {self.url} failed: {e}") from e

        if not response.is_success:
            raise TransportError(
                f"GET {self.url} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload: Any = response.json()
        except ValueError as e:
            raise TransportError(f"GET {self.url} returned invalid JSON") from e

        if not isinstance(payload, list):
            raise TransportError(f"GET {self.url} did not return a list of requests")

        try:
            requests = [Request.model_validate(item) for item in payload]
        except ValidationError as e:
            raise TransportError(f"GET {self.url} returned malformed requests: {e}") from e

        logger.debug("Fetched %d requests for %s", len(requests), owner_id)
        return requests

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
