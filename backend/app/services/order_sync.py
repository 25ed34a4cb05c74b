"""
Orders sync: Shopify orders and line items into the local store.
"""
import asyncio
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.database import Database
from app.core.logging import get_logger
from app.models.store import Store
from app.repositories.order import OrderRepository
from app.repositories.product import ProductRepository
from app.services.http_client import Page, SleepFunc
from app.services.identifiers import extract_order_number, normalize
from app.services.parsing import format_shopify_query_date, money, parse_iso
from app.services.shopify_client import ShopifyGraphQLClient
from app.services.sync_base import PagedSync, SyncResult

logger = get_logger(__name__)


def map_order(node: dict[str, Any], store_id: Any) -> dict[str, Any]:
    """Map a GraphQL order node onto Order columns."""
    return {
        "store_id": store_id,
        "shopify_order_id": normalize(node.get("id"), "Order"),
        "legacy_resource_id": node.get("legacyResourceId"),
        "number": extract_order_number(node.get("name")),
        "name": node.get("name"),
        "email": node.get("email"),
        "phone": node.get("phone"),
        "currency_code": node.get("currencyCode") or "USD",
        "presentment_currency_code": node.get("presentmentCurrencyCode")
        or node.get("currencyCode")
        or "USD",
        "current_total_price_amount": money(node.get("currentTotalPriceSet")) or Decimal("0"),
        "current_total_price_presentment_amount": money(
            node.get("currentTotalPriceSet"), "presentmentMoney"
        ),
        "current_subtotal_price_amount": money(node.get("currentSubtotalPriceSet")) or Decimal("0"),
        "current_subtotal_price_presentment_amount": money(
            node.get("currentSubtotalPriceSet"), "presentmentMoney"
        ),
        "current_total_tax_amount": money(node.get("currentTotalTaxSet")),
        "current_total_tax_presentment_amount": money(
            node.get("currentTotalTaxSet"), "presentmentMoney"
        ),
        "display_financial_status": node.get("displayFinancialStatus"),
        "display_fulfillment_status": node.get("displayFulfillmentStatus"),
        "confirmed": bool(node.get("confirmed")),
        "closed": bool(node.get("closed")),
        "cancelled_at": parse_iso(node.get("cancelledAt")),
        "cancel_reason": node.get("cancelReason"),
        "taxes_included": bool(node.get("taxesIncluded")),
        "test": bool(node.get("test")),
        "created_at": parse_iso(node.get("createdAt")),
        "processed_at": parse_iso(node.get("processedAt") or node.get("createdAt")),
    }


def map_line_item(node: dict[str, Any], product_variant_id: Any = None) -> dict[str, Any]:
    """Map a GraphQL line item node onto OrderLineItem columns."""
    product = node.get("product") or {}
    variant = node.get("variant") or {}
    return {
        "shopify_line_item_id": normalize(node.get("id"), "LineItem"),
        "product_variant_id": product_variant_id,
        "name": node.get("name") or "",
        "variant_title": node.get("variantTitle"),
        "shopify_product_id": normalize(product.get("id"), "Product") or None,
        "shopify_variant_id": normalize(variant.get("id"), "ProductVariant") or None,
        "sku": node.get("sku"),
        "quantity": node.get("quantity") or 0,
        "current_quantity": node.get("currentQuantity") or 0,
        "original_unit_price_amount": money(node.get("originalUnitPriceSet")) or Decimal("0"),
        "original_unit_price_presentment_amount": money(
            node.get("originalUnitPriceSet"), "presentmentMoney"
        ),
        "original_total_price_amount": money(node.get("originalTotalSet")) or Decimal("0"),
        "original_total_price_presentment_amount": money(
            node.get("originalTotalSet"), "presentmentMoney"
        ),
        "requires_shipping": node.get("requiresShipping", True),
    }


class OrderSync(PagedSync):
    """Upsert orders by normalized ID and replace their line items."""

    entity = "Order"

    def __init__(
        self,
        db: Database,
        settings: Settings,
        client: ShopifyGraphQLClient,
        *,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        super().__init__(db, settings, sleep=sleep)
        self.client = client

    async def fetch_page(
        self,
        store: Store,
        *,
        cursor: Optional[str],
        page_size: int,
        from_date: datetime,
        to_date: Optional[datetime],
    ) -> Page:
        return await self.client.fetch_orders(
            first=page_size,
            after=cursor,
            from_date=format_shopify_query_date(from_date),
        )

    async def process_record(
        self,
        session: AsyncSession,
        store: Store,
        record: dict[str, Any],
        result: SyncResult,
    ) -> bool:
        orders = OrderRepository(session)
        products = ProductRepository(session)

        order, created = await orders.upsert(map_order(record, store.id))

        line_items = []
        for node in (record.get("lineItems") or {}).get("nodes") or []:
            variant_id = None
            variant_gid = (node.get("variant") or {}).get("id")
            if variant_gid:
                variant = await products.get_variant_by_shopify_id(normalize(variant_gid, "ProductVariant"))
                variant_id = variant.id if variant else None
            line_items.append(map_line_item(node, variant_id))

        count = await orders.replace_line_items(order.id, line_items)
        result.bump("lineItemsProcessed", count)

        logger.debug(
            "Order synced",
            order=order.name,
            shopify_order_id=order.shopify_order_id,
            created=created,
            line_items=count,
        )
        return created
