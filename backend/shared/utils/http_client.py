"""
Async HTTP client wrapper for provider requests.
Includes retry logic, timeout management, and metrics collection.
"""
from __future__ import annotations

import asyncio
import time
from typing import Any, Optional

import httpx

from shared.utils.logging import get_logger
from shared.utils.metrics import PROVIDER_LATENCY, PROVIDER_REQUESTS

logger = get_logger(__name__)


class ProviderHTTPClient:
    """
    Async HTTP client tailored for sports data provider APIs.
    Handles timeouts, retries, and records metrics per request.
    """

    def __init__(
        self,
        provider_name: str,
        base_url: str,
        headers: dict[str, str] | None = None,
        timeout_s: float = 10.0,
        max_retries: int = 2,
        retry_base_delay_s: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._provider = provider_name
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_s
        self._max_retries = max(1, max_retries)
        self._retry_base_delay = retry_base_delay_s
        self._default_headers = headers or {}
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def provider(self) -> str:
        return self._provider

    async def start(self) -> None:
        """Initialize the underlying httpx client."""
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._default_headers,
            timeout=httpx.Timeout(self._timeout, connect=5.0),
            follow_redirects=True,
            transport=self._transport,
        )

    async def close(self) -> None:
        """Close the underlying httpx client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ProviderHTTPClient":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """
        Perform a GET request with retry, metrics, and structured logging.

        Retries on 429, 5xx and timeouts; 4xx responses raise immediately.

        Raises:
            httpx.HTTPStatusError: On non-retryable HTTP errors or exhausted retries.
            httpx.TransportError: If the transport keeps failing.
            ValueError: If the body is not JSON.
        """
        if not self._client:
            raise RuntimeError("ProviderHTTPClient not started. Call start() first.")

        last_exc: Optional[Exception] = None
        for attempt in range(1, self._max_retries + 1):
            start_time = time.perf_counter()
            status = "unknown"
            try:
                resp = await self._client.get(path, params=params)
                status = str(resp.status_code)
                retryable = resp.status_code == 429 or resp.status_code >= 500
                if retryable and attempt < self._max_retries:
                    delay = self._retry_delay(resp, attempt)
                    logger.warning(
                        "provider_retryable_status",
                        provider=self._provider,
                        path=path,
                        status=resp.status_code,
                        attempt=attempt,
                        delay_s=delay,
                    )
                    await asyncio.sleep(delay)
                    continue
                resp.raise_for_status()
                logger.debug(
                    "provider_request_success",
                    provider=self._provider,
                    path=path,
                    status=resp.status_code,
                    latency_ms=round((time.perf_counter() - start_time) * 1000, 2),
                )
                return resp.json()

            except httpx.TimeoutException as exc:
                status = "timeout"
                last_exc = exc
                logger.warning("provider_timeout", provider=self._provider, path=path, attempt=attempt)
                if attempt < self._max_retries:
                    await asyncio.sleep(self._retry_base_delay * attempt)
                    continue

            except httpx.HTTPStatusError as exc:
                logger.error(
                    "provider_http_error",
                    provider=self._provider,
                    path=path,
                    status=exc.response.status_code,
                    attempt=attempt,
                )
                raise

            finally:
                PROVIDER_REQUESTS.labels(provider=self._provider, status=status).inc()
                PROVIDER_LATENCY.labels(provider=self._provider).observe(time.perf_counter() - start_time)

        if last_exc:
            raise last_exc
        raise RuntimeError(f"Provider request failed after {self._max_retries} attempts")

    def _retry_delay(self, resp: httpx.Response, attempt: int) -> float:
        if resp.status_code == 429:
            try:
                return min(float(resp.headers.get("Retry-After", "2")), 10.0)
            except ValueError:
                return 2.0
        return self._retry_base_delay * attempt
