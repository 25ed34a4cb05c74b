"""
SWAP returns REST client.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx

from app.core.config import Settings
from app.core.logging import get_logger
from app.services.http_client import Page, RetryingClient, SleepFunc
from app.services.parsing import format_swap_query_date

logger = get_logger(__name__)

MAX_ITEMS_PER_PAGE = 50


class SwapClient:
    """Async SWAP API client authenticated with an `x-api-key` header."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api-mfdugldntq-nw.a.run.app/v1/external",
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[SleepFunc] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        extra = {"sleep": sleep} if sleep is not None else {}
        self.http = RetryingClient(
            headers={
                "Content-Type": "application/json",
                "x-api-key": api_key,
            },
            timeout=timeout,
            max_retries=max_retries,
            retry_delay=retry_delay,
            transport=transport,
            name="swap",
            **extra,
        )

    @classmethod
    def from_settings(cls, settings: Settings, api_key: str, **kwargs: Any) -> "SwapClient":
        return cls(
            api_key,
            base_url=settings.swap_api_base_url,
            timeout=settings.api_timeout_seconds,
            max_retries=settings.api_max_retries,
            retry_delay=settings.api_retry_delay_seconds,
            **kwargs,
        )

    def returns_url(
        self,
        *,
        store: str,
        from_date: datetime,
        to_date: Optional[datetime] = None,
        page: int = 1,
        items_per_page: int = MAX_ITEMS_PER_PAGE,
        version: int = 1,
    ) -> str:
        """
        Build the /returns URL by hand.

        SWAP rejects percent-encoded colons in the date parameters, so the
        query string is not passed through the client's param encoder.
        """
        params = [
            f"store={store}",
            f"from_date={format_swap_query_date(from_date)}",
        ]
        if to_date is not None:
            params.append(f"to_date={format_swap_query_date(to_date)}")
        params += [
            f"page={page}",
            f"items_per_page={min(items_per_page, MAX_ITEMS_PER_PAGE)}",
            f"version={version}",
        ]
        return f"{self.base_url}/returns?{'&'.join(params)}"

    async def fetch_returns(
        self,
        *,
        store: str,
        from_date: datetime,
        to_date: Optional[datetime] = None,
        page: int = 1,
        items_per_page: int = MAX_ITEMS_PER_PAGE,
    ) -> Page:
        """Fetch one page of returns; the cursor is the next page number."""
        url = self.returns_url(
            store=store,
            from_date=from_date,
            to_date=to_date,
            page=page,
            items_per_page=items_per_page,
        )
        response = await self.http.get(url)
        payload = response.json()
        pagination = payload.get("pagination") or {}
        return Page(
            nodes=payload.get("orders") or [],
            has_next_page=bool(pagination.get("has_next_page")),
            cursor=str(page + 1),
        )

    async def test_connection(self, store: str) -> bool:
        """Fetch a single return from the last 30 days; failures are logged, never raised."""
        try:
            await self.fetch_returns(
                store=store,
                from_date=datetime.now(timezone.utc) - timedelta(days=30),
                items_per_page=1,
            )
            logger.info("SWAP connection test successful", store=store)
            return True
        except Exception as e:
            logger.error("SWAP connection test failed", store=store, error=str(e))
            return False
