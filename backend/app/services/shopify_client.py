"""
Shopify GraphQL client for API interactions.
Paginated orders, products and collections queries on top of the retrying client.
"""
from typing import Any, Optional

import httpx

from app.core.config import Settings
from app.core.errors import GraphQLError
from app.core.logging import get_logger
from app.services.http_client import Page, RetryingClient, SleepFunc

logger = get_logger(__name__)

MONEY_BAG = """
    shopMoney { amount currencyCode }
    presentmentMoney { amount currencyCode }
"""

ORDERS_QUERY = """
query GetOrders($first: Int!, $after: String, $query: String) {
    orders(first: $first, after: $after, query: $query) {
        nodes {
            id
            legacyResourceId
            name
            email
            phone
            currencyCode
            presentmentCurrencyCode
            currentTotalPriceSet { %(money)s }
            currentSubtotalPriceSet { %(money)s }
            currentTotalTaxSet { %(money)s }
            displayFinancialStatus
            displayFulfillmentStatus
            confirmed
            closed
            cancelledAt
            cancelReason
            taxesIncluded
            test
            createdAt
            processedAt
            updatedAt
            lineItems(first: 250) {
                nodes {
                    id
                    name
                    variantTitle
                    product { id }
                    variant { id }
                    sku
                    quantity
                    currentQuantity
                    originalUnitPriceSet { %(money)s }
                    originalTotalSet { %(money)s }
                    requiresShipping
                }
            }
        }
        pageInfo {
            hasNextPage
            endCursor
        }
    }
}
""" % {"money": MONEY_BAG}

COLLECTION_FIELDS = """
    id
    legacyResourceId
    title
    handle
    description
    updatedAt
"""

PRODUCTS_QUERY = """
query GetProducts($first: Int!, $after: String, $query: String) {
    products(first: $first, after: $after, query: $query) {
        nodes {
            id
            legacyResourceId
            title
            handle
            productType
            vendor
            description
            descriptionHtml
            status
            publishedAt
            tags
            createdAt
            updatedAt
            variants(first: 250) {
                nodes {
                    id
                    legacyResourceId
                    title
                    sku
                    barcode
                    position
                    price
                    compareAtPrice
                    inventoryQuantity
                    availableForSale
                    inventoryPolicy
                    taxable
                    createdAt
                    updatedAt
                }
            }
            collections(first: 250) {
                nodes { %(collection)s }
            }
        }
        pageInfo {
            hasNextPage
            endCursor
        }
    }
}
""" % {"collection": COLLECTION_FIELDS}

COLLECTIONS_QUERY = """
query GetCollections($first: Int!, $after: String, $query: String) {
    collections(first: $first, after: $after, query: $query) {
        nodes { %(collection)s }
        pageInfo {
            hasNextPage
            endCursor
        }
    }
}
""" % {"collection": COLLECTION_FIELDS}

SHOP_QUERY = """
query {
    shop {
        id
        name
    }
}
"""


def raise_for_graphql_errors(response: httpx.Response) -> None:
    """GraphQL reports query failures inside an HTTP 200."""
    payload = response.json()
    if payload.get("errors"):
        raise GraphQLError(payload["errors"])


class ShopifyGraphQLClient:
    """
    Async Shopify GraphQL API client.

    Features:
    - Cursor pagination for orders, products and collections
    - Date filtering through the search `query` argument
    - Retries, rate limits and error classification via RetryingClient
    """

    GRAPHQL_ENDPOINT = "https://{domain}/admin/api/{version}/graphql.json"

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        *,
        api_version: str = "2024-10",
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[SleepFunc] = None,
    ) -> None:
        self.shop_domain = shop_domain
        self.endpoint = self.GRAPHQL_ENDPOINT.format(domain=shop_domain, version=api_version)
        extra = {"sleep": sleep} if sleep is not None else {}
        self.http = RetryingClient(
            headers={
                "Content-Type": "application/json",
                "X-Shopify-Access-Token": access_token,
            },
            timeout=timeout,
            max_retries=max_retries,
            retry_delay=retry_delay,
            transport=transport,
            name="shopify",
            **extra,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        shop_domain: str,
        access_token: str,
        **kwargs: Any,
    ) -> "ShopifyGraphQLClient":
        return cls(
            shop_domain,
            access_token,
            api_version=settings.shopify_api_version,
            timeout=settings.api_timeout_seconds,
            max_retries=settings.api_max_retries,
            retry_delay=settings.api_retry_delay_seconds,
            **kwargs,
        )

    async def execute_query(
        self,
        query: str,
        variables: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """
        Execute a GraphQL query against Shopify API.

        Args:
            query: GraphQL query string
            variables: Optional query variables

        Returns:
            Query result data

        Raises:
            ApiError: On transport, HTTP or GraphQL errors
        """
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        response = await self.http.post(
            self.endpoint,
            json=payload,
            validate=raise_for_graphql_errors,
        )
        return response.json().get("data") or {}

    async def _fetch_page(
        self,
        root: str,
        query: str,
        *,
        first: int,
        after: Optional[str],
        search: Optional[str],
    ) -> Page:
        data = await self.execute_query(
            query,
            {"first": first, "after": after, "query": search},
        )
        connection = data.get(root) or {}
        page_info = connection.get("pageInfo") or {}
        return Page(
            nodes=connection.get("nodes") or [],
            has_next_page=bool(page_info.get("hasNextPage")),
            cursor=page_info.get("endCursor"),
        )

    async def fetch_orders(
        self,
        first: int = 50,
        after: Optional[str] = None,
        from_date: Optional[str] = None,
    ) -> Page:
        """Fetch one page of orders created on or after `from_date`."""
        search = f"created_at:>='{from_date}'" if from_date else None
        return await self._fetch_page("orders", ORDERS_QUERY, first=first, after=after, search=search)

    async def fetch_products(
        self,
        first: int = 50,
        after: Optional[str] = None,
        from_date: Optional[str] = None,
    ) -> Page:
        """Fetch one page of products with variants and collections."""
        search = f"created_at:>='{from_date}'" if from_date else None
        return await self._fetch_page("products", PRODUCTS_QUERY, first=first, after=after, search=search)

    async def fetch_collections(
        self,
        first: int = 50,
        after: Optional[str] = None,
        from_date: Optional[str] = None,
    ) -> Page:
        """Fetch one page of collections updated on or after `from_date`."""
        search = f"updated_at:>='{from_date}'" if from_date else None
        return await self._fetch_page(
            "collections", COLLECTIONS_QUERY, first=first, after=after, search=search
        )

    async def test_connection(self) -> bool:
        """Issue a minimal shop query; failures are logged, never raised."""
        try:
            await self.execute_query(SHOP_QUERY)
            return True
        except Exception as e:
            logger.error("Shopify connection test failed", shop=self.shop_domain, error=str(e))
            return False
