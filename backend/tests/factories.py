"""
Payload builders and fake platform APIs for tests.

The fakes plug into the real clients through `httpx.MockTransport`, so
requests go through the same retry and parsing code as production.
"""
import json
from typing import Any, Optional

import httpx

from app.repositories.order import OrderRepository
from app.repositories.returns import ReturnRepository
from app.services.order_sync import map_order
from app.services.return_sync import map_return, map_return_product, map_return_reason


def money_bag(amount: str, currency: str = "USD") -> dict[str, Any]:
    return {
        "shopMoney": {"amount": amount, "currencyCode": currency},
        "presentmentMoney": {"amount": amount, "currencyCode": currency},
    }


def line_item_node(
    item_id: int,
    *,
    variant_id: Optional[int] = None,
    product_id: Optional[int] = None,
    quantity: int = 1,
    price: str = "25.00",
) -> dict[str, Any]:
    return {
        "id": f"gid://shopify/LineItem/{item_id}",
        "name": f"Item {item_id}",
        "variantTitle": "Default",
        "product": {"id": f"gid://shopify/Product/{product_id}"} if product_id else None,
        "variant": {"id": f"gid://shopify/ProductVariant/{variant_id}"} if variant_id else None,
        "sku": f"SKU-{item_id}",
        "quantity": quantity,
        "currentQuantity": quantity,
        "originalUnitPriceSet": money_bag(price),
        "originalTotalSet": money_bag(price),
        "requiresShipping": True,
    }


def order_node(
    order_id: int,
    *,
    name: Optional[str] = None,
    total: str = "100.00",
    financial_status: str = "PAID",
    created_at: str = "2025-01-10T12:00:00Z",
    line_items: Optional[list[dict[str, Any]]] = None,
) -> dict[str, Any]:
    return {
        "id": f"gid://shopify/Order/{order_id}",
        "legacyResourceId": str(order_id),
        "name": name or f"#{order_id % 100000}",
        "email": "customer@example.com",
        "phone": None,
        "currencyCode": "USD",
        "presentmentCurrencyCode": "USD",
        "currentTotalPriceSet": money_bag(total),
        "currentSubtotalPriceSet": money_bag(total),
        "currentTotalTaxSet": money_bag("0.00"),
        "displayFinancialStatus": financial_status,
        "displayFulfillmentStatus": "FULFILLED",
        "confirmed": True,
        "closed": False,
        "cancelledAt": None,
        "cancelReason": None,
        "taxesIncluded": False,
        "test": False,
        "createdAt": created_at,
        "processedAt": created_at,
        "updatedAt": created_at,
        "lineItems": {"nodes": line_items or []},
    }


def collection_node(collection_id: int, title: Optional[str] = None) -> dict[str, Any]:
    return {
        "id": f"gid://shopify/Collection/{collection_id}",
        "legacyResourceId": str(collection_id),
        "title": title or f"Collection {collection_id}",
        "handle": f"collection-{collection_id}",
        "description": "",
        "updatedAt": "2025-01-05T00:00:00Z",
    }


def variant_node(variant_id: int, price: str = "25.00") -> dict[str, Any]:
    return {
        "id": f"gid://shopify/ProductVariant/{variant_id}",
        "legacyResourceId": str(variant_id),
        "title": "Default",
        "sku": f"VAR-{variant_id}",
        "barcode": None,
        "position": 1,
        "price": price,
        "compareAtPrice": None,
        "inventoryQuantity": 10,
        "availableForSale": True,
        "inventoryPolicy": "DENY",
        "taxable": True,
        "createdAt": "2025-01-01T00:00:00Z",
        "updatedAt": "2025-01-01T00:00:00Z",
    }


def product_node(
    product_id: int,
    *,
    variants: Optional[list[dict[str, Any]]] = None,
    collections: Optional[list[dict[str, Any]]] = None,
) -> dict[str, Any]:
    return {
        "id": f"gid://shopify/Product/{product_id}",
        "legacyResourceId": str(product_id),
        "title": f"Product {product_id}",
        "handle": f"product-{product_id}",
        "productType": "Apparel",
        "vendor": "Acme",
        "description": "",
        "descriptionHtml": "",
        "status": "ACTIVE",
        "publishedAt": "2025-01-01T00:00:00Z",
        "tags": ["summer", "sale"],
        "createdAt": "2025-01-01T00:00:00Z",
        "updatedAt": "2025-01-02T00:00:00Z",
        "variants": {"nodes": variants or []},
        "collections": {"nodes": collections or []},
    }


def return_node(
    return_id: str,
    *,
    order_id: Optional[str] = None,
    order_name: str = "#1001",
    rma: Optional[str] = None,
    type_string: str = "Refund",
    status: str = "Closed",
    refund: str = "50.00",
    date_created: str = "23 Sept 2025, 14:52:21",
    products: Optional[list[dict[str, Any]]] = None,
    reasons: Optional[list[dict[str, Any]]] = None,
) -> dict[str, Any]:
    return {
        "return_id": return_id,
        "order_name": order_name,
        "order_id": order_id,
        "rma": rma or f"RMA-{return_id}",
        "type_string": type_string,
        "type": [type_string],
        "return_status": status,
        "delivery_status": "Delivered",
        "total": refund,
        "handling_fee": "0",
        "refund_revenue": refund,
        "total_refund_value_customer_currency": refund,
        "customer_name": "Jane Doe",
        "customer_currency": "USD",
        "customer_locale": "en",
        "shipping_carrier": "UPS",
        "tracking_number": "1Z999",
        "tags": ["vip"],
        "processed": True,
        "processed_by": "warehouse",
        "tax_information": {"total_tax": "4.00", "total_duty": None, "currency": "USD"},
        "billing_address": {
            "city": "Austin",
            "state_province_code": "TX",
            "country_code": "US",
            "postcode": "73301",
        },
        "shipping_address": {"city": "Austin", "province": "TX", "country_code": "US", "zip": "73301"},
        "date_created": date_created,
        "date_updated": date_created,
        "submitted_at": date_created,
        "date_closed": "N/A",
        "delivered_date": "",
        "shopify_order_date": "20 Sept 2025, 09:00:00",
        "products": products if products is not None else [return_product_node("P1")],
        "return_reasons": reasons if reasons is not None else [{"reason": "Too small", "item_count": 1}],
    }


def return_product_node(product_id: str, *, item_count: int = 1, cost: str = "50.00") -> dict[str, Any]:
    return {
        "product_id": product_id,
        "shopify_product_id": "987",
        "shopify_variant_id": "654",
        "product_name": f"Returned {product_id}",
        "variant_name": "M",
        "sku": f"SKU-{product_id}",
        "item_count": item_count,
        "cost": cost,
        "currency": "USD",
        "return_type": "Refund",
        "main_reason_text": "Sizing",
        "sub_reason_text": "Too small",
        "collection": ["Summer"],
        "tags": [],
        "is_faulty": False,
    }


def graphql_connection(
    nodes: list[dict[str, Any]],
    *,
    has_next_page: bool = False,
    cursor: Optional[str] = None,
) -> dict[str, Any]:
    return {"nodes": nodes, "pageInfo": {"hasNextPage": has_next_page, "endCursor": cursor}}


class SleepRecorder:
    """Stand-in for asyncio.sleep that records delays instead of waiting."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


class FakeShopifyApi:
    """
    Shopify GraphQL endpoint backed by queued pages.

    Scripted responses in `responses` are served first, in order.
    """

    OPERATIONS = {"GetOrders": "orders", "GetProducts": "products", "GetCollections": "collections"}

    def __init__(self) -> None:
        self.pages: dict[str, list[dict[str, Any]]] = {root: [] for root in self.OPERATIONS.values()}
        self.responses: list[httpx.Response] = []
        self.requests: list[dict[str, Any]] = []
        self.raw_requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self.handler)

    def add_page(self, root: str, nodes: list[dict[str, Any]], *, has_next_page: bool = False,
                 cursor: Optional[str] = None) -> None:
        self.pages[root].append(graphql_connection(nodes, has_next_page=has_next_page, cursor=cursor))

    def calls_for(self, root: str) -> list[dict[str, Any]]:
        operation = next(op for op, name in self.OPERATIONS.items() if name == root)
        return [r for r in self.requests if operation in r["query"]]

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.requests.append(payload)
        self.raw_requests.append(request)
        if self.responses:
            return self.responses.pop(0)

        query = payload["query"]
        for operation, root in self.OPERATIONS.items():
            if operation in query:
                queued = self.pages[root]
                connection = queued.pop(0) if queued else graphql_connection([])
                return httpx.Response(200, json={"data": {root: connection}})
        return httpx.Response(200, json={"data": {"shop": {"id": "gid://shopify/Shop/1", "name": "Test"}}})


class FakeSwapApi:
    """SWAP /returns endpoint backed by queued pages."""

    def __init__(self) -> None:
        self.pages: list[dict[str, Any]] = []
        self.source: Optional[list[dict[str, Any]]] = None
        self.responses: list[httpx.Response] = []
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self.handler)

    def add_page(self, returns: list[dict[str, Any]], *, has_next_page: bool = False) -> None:
        self.pages.append({"orders": returns, "pagination": {"has_next_page": has_next_page}})

    def serve(self, returns: list[dict[str, Any]]) -> None:
        """Page through a fixed set of returns by `page` and `items_per_page`."""
        self.source = returns

    def _slice(self, request: httpx.Request) -> dict[str, Any]:
        size = int(request.url.params["items_per_page"])
        page = int(request.url.params["page"])
        start = (page - 1) * size
        chunk = self.source[start : start + size]
        return {"orders": chunk, "pagination": {"has_next_page": start + size < len(self.source)}}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            return self.responses.pop(0)
        if self.source is not None:
            return httpx.Response(200, json=self._slice(request))
        page = self.pages.pop(0) if self.pages else {"orders": [], "pagination": {"has_next_page": False}}
        return httpx.Response(200, json=page)


async def seed_order(db, store_id, order_id: int, **kwargs: Any):
    """Insert an order as the orders sync would."""
    async with db.session() as session:
        order, _ = await OrderRepository(session).upsert(map_order(order_node(order_id, **kwargs), store_id))
    return order


async def seed_return(db, store_id, return_id: str, **kwargs: Any):
    """Insert a return as the returns sync would, without pre-linking."""
    node = return_node(return_id, **kwargs)
    async with db.session() as session:
        returns = ReturnRepository(session)
        record, _ = await returns.upsert(map_return(node, store_id))
        await returns.replace_children(
            record.id,
            [map_return_product(p) for p in node["products"]],
            [map_return_reason(r) for r in node["return_reasons"]],
        )
    return record
