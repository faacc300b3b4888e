"""HTTP client service with retry logic and rate limiting."""

import asyncio
import time
from typing import Any

import httpx
import structlog

log = structlog.stdlib.get_logger()


class HttpClientService:
    """HTTP client service with retry logic, rate limiting, and timeout handling."""

    def __init__(
        self,
        timeout: float = 30.0,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        rate_limit_delay: float = 0.25,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client service.

        Args:
            timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts
            base_delay: Base delay for exponential backoff in seconds
            max_delay: Maximum delay between retries in seconds
            rate_limit_delay: Minimum delay between requests in seconds
            transport: Optional transport, mainly for tests
        """
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.rate_limit_delay = rate_limit_delay
        self._last_request_time: float = 0.0

        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"User-Agent": "retrovoid/0.1"},
            follow_redirects=True,
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
            transport=transport,
        )

        log.debug(
            "HTTP client service initialized",
            timeout=timeout,
            max_retries=max_retries,
            rate_limit_delay=rate_limit_delay,
        )

    async def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Make a GET request with retry logic and rate limiting."""
        return await self.request("GET", url, headers=headers, params=params)

    async def post(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        content: str | None = None,
        data: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Make a POST request with retry logic and rate limiting."""
        return await self.request("POST", url, headers=headers, params=params, content=content, data=data)

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        content: str | None = None,
        data: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a request, retrying transient failures with exponential backoff.

        Client errors (4xx) are not retried, except 429 which waits for the
        server's ``Retry-After`` when one is given.

        Returns:
            HTTP response object

        Raises:
            httpx.HTTPStatusError: On a client error or after all retries
            httpx.RequestError: If the request keeps failing at transport level
        """
        for attempt in range(self.max_retries + 1):
            await self._enforce_rate_limit()
            try:
                log.debug("Making HTTP request", method=method, url=url, attempt=attempt + 1)

                response = await self._client.request(
                    method,
                    url,
                    headers=headers,
                    params=params,
                    content=content,
                    data=data,
                )
                response.raise_for_status()

                log.debug("HTTP request successful", method=method, url=url, status_code=response.status_code)
                return response

            except (httpx.HTTPStatusError, httpx.RequestError) as e:
                log.warning(
                    "HTTP request failed",
                    method=method,
                    url=url,
                    attempt=attempt + 1,
                    error=str(e),
                    error_type=type(e).__name__,
                )

                if isinstance(e, httpx.HTTPStatusError):
                    if e.response.status_code == 429:
                        retry_after = e.response.headers.get("retry-after")
                        if retry_after and attempt < self.max_retries:
                            try:
                                delay = float(retry_after)
                                log.info("Rate limited, waiting", delay=delay)
                                await asyncio.sleep(delay)
                                continue
                            except ValueError:
                                pass
                    elif 400 <= e.response.status_code < 500:
                        log.error("Client error, not retrying", status_code=e.response.status_code)
                        raise

                if attempt == self.max_retries:
                    log.error("HTTP request failed after all retries", url=url, total_attempts=self.max_retries + 1)
                    raise

                delay = min(self.base_delay * (2 ** attempt), self.max_delay)
                log.info("Retrying after delay", delay=delay)
                await asyncio.sleep(delay)

        raise RuntimeError("Unexpected end of retry loop")

    async def _enforce_rate_limit(self) -> None:
        """Enforce rate limiting between requests."""
        time_since_last = time.monotonic() - self._last_request_time

        if time_since_last < self.rate_limit_delay:
            sleep_time = self.rate_limit_delay - time_since_last
            log.debug("Rate limiting: sleeping", sleep_time=sleep_time)
            await asyncio.sleep(sleep_time)

        self._last_request_time = time.monotonic()

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        await self._client.aclose()
        log.debug("HTTP client closed")

    async def __aenter__(self) -> "HttpClientService":
        return self

    async def __aexit__(self, exc_type: type[Exception] | None, exc_val: Exception | None, exc_tb: Any) -> None:
        await self.close()
