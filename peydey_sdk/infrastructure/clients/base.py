"""Shared httpx plumbing with exponential backoff retry logic"""

import asyncio
import logging
from typing import Any, Dict, Optional
import httpx

logger = logging.getLogger(__name__)


class RetryingJsonClient:
    """
    POSTs JSON to a base URL, retrying idempotent calls.

    Retry strategy:
    - Exponential backoff: base, 2*base, 4*base, ... (base * 2^(attempt-1))
    - Retries on 5xx responses and network failures
    - 4xx responses are returned to the caller untouched
    """

    def __init__(
        self,
        base_url: str,
        timeout: float,
        max_retries: int,
        backoff_base: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(max_retries, 1)
        self.backoff_base = backoff_base
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def post_json(self, path: str, payload: Dict[str, Any], retry: bool = True) -> httpx.Response:
        """
        Raises:
            httpx.HTTPStatusError: 5xx on the final attempt
            httpx.RequestError: Network failure on the final attempt
        """
        attempts = self.max_retries if retry else 1
        attempt = 0
        async with self._client() as client:
            while True:
                try:
                    response = await client.post(path, json=payload)
                    if response.status_code >= 500:
                        response.raise_for_status()
                    return response

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    if attempt >= attempts:
                        # Final failure after all retries
                        raise

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    logger.warning(
                        f"POST {path} failed ({e!r}), retrying in {backoff}s",
                        extra={"attempt": attempt, "path": path},
                    )
                    await asyncio.sleep(backoff)
