"""HTTP fetcher for OpenAPI documentation sources."""

import json
import logging
from typing import Any

import httpx

from knife4j_mcp.errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class HttpFetcher:
    """Fetches and decodes JSON OpenAPI documents over HTTP(S)."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, transport: httpx.AsyncBaseTransport | None = None):
        self.timeout = httpx.Timeout(timeout)
        self.transport = transport

    async def fetch(self, url: str) -> Any:
        """GET ``url`` and return the decoded JSON body.

        Raises FetchError on transport errors, non-2xx statuses and bodies
        that are not JSON.
        """
        logger.info("Fetching OpenAPI document from %s", url)
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            try:
                response = await client.get(url, headers={"Accept": "application/json"})
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise FetchError(url, f"HTTP {e.response.status_code}") from e
            except httpx.HTTPError as e:
                raise FetchError(url, str(e) or type(e).__name__) from e

        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise FetchError(url, f"response is not valid JSON: {e}") from e
