"""
Retrying HTTP client shared by the Shopify and SWAP clients.
Handles timeouts, backoff with jitter, rate limits and failure classification.
"""
import asyncio
import random
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from app.core.errors import (
    ApiError,
    ApiRateLimitError,
    ApiTimeoutError,
    ApiTransportError,
    MaxRetriesError,
    classify_response,
    is_retryable,
)
from app.core.logging import get_logger

logger = get_logger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


@dataclass
class Page:
    """One page of records from a paginated endpoint."""

    nodes: list[dict[str, Any]]
    has_next_page: bool
    cursor: Optional[str] = None


def backoff_delay(base_delay: float, attempt: int, rng: Callable[[], float] = random.random) -> float:
    """`base * 2^attempt` plus up to 10% jitter."""
    delay = base_delay * (2 ** attempt)
    return delay + delay * 0.1 * rng()


class RetryingClient:
    """
    Async HTTP client with per-attempt timeout and bounded retries.

    `max_retries=3` means up to four attempts. Auth, not-found, other 4xx
    and GraphQL errors are raised immediately; rate limits, 5xx, timeouts
    and transport errors are retried and end in `MaxRetriesError`.
    """

    def __init__(
        self,
        *,
        base_url: str = "",
        headers: Optional[dict[str, str]] = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: SleepFunc = asyncio.sleep,
        name: str = "api",
    ) -> None:
        self.base_url = base_url
        self.headers = headers or {}
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.transport = transport
        self.sleep = sleep
        self.name = name

    def _client(self) -> httpx.AsyncClient:
        # Fresh client and timeout per attempt
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=httpx.Timeout(self.timeout),
            transport=self.transport,
        )

    async def _attempt(
        self,
        method: str,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        try:
            async with self._client() as client:
                response = await client.request(method, url, params=params, json=json)
        except httpx.TimeoutException as e:
            raise ApiTimeoutError(f"Request timed out after {self.timeout}s") from e
        except httpx.TransportError as e:
            raise ApiTransportError(f"Request failed: {e}") from e

        error = classify_response(response)
        if error is not None:
            raise error
        return response

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
        validate: Optional[Callable[[httpx.Response], None]] = None,
    ) -> httpx.Response:
        """
        Perform a request with retries.

        Args:
            method: HTTP method
            url: Absolute URL or path relative to `base_url`
            params: Query parameters
            json: JSON body
            validate: Optional hook run on a 2xx response; may raise a terminal ApiError

        Raises:
            ApiError: Terminal failure, or MaxRetriesError once retries run out
        """
        attempts = self.max_retries + 1
        last_error: Optional[ApiError] = None

        for attempt in range(attempts):
            started = time.monotonic()
            logger.debug(
                "API request",
                client=self.name,
                method=method,
                url=url,
                attempt=attempt + 1,
            )
            try:
                response = await self._attempt(method, url, params=params, json=json)
                if validate is not None:
                    validate(response)
                logger.debug(
                    "API response",
                    client=self.name,
                    status=response.status_code,
                    duration_ms=round((time.monotonic() - started) * 1000),
                )
                return response
            except ApiError as e:
                last_error = e
                retryable = is_retryable(e)
                will_retry = retryable and attempt + 1 < attempts
                logger.warning(
                    "API request failed",
                    client=self.name,
                    url=url,
                    attempt=attempt + 1,
                    status=e.status_code,
                    error=e.message,
                    will_retry=will_retry,
                )
                if not retryable:
                    raise
                if not will_retry:
                    break

                if isinstance(e, ApiRateLimitError) and e.retry_after is not None:
                    delay = e.retry_after
                else:
                    delay = backoff_delay(self.retry_delay, attempt)
                await self.sleep(delay)

        if last_error is None:
            raise ApiError(f"No request attempts made for {method} {url}")
        raise MaxRetriesError(attempts, last_error) from last_error

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)
