"""
Returns sync: SWAP returns, their products and reasons.
"""
import asyncio
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.database import Database
from app.core.logging import get_logger
from app.models.store import Store
from app.repositories.order import OrderRepository
from app.repositories.returns import ReturnRepository
from app.services.http_client import Page, SleepFunc
from app.services.identifiers import normalize_swap
from app.services.parsing import (
    extract_addresses,
    json_list,
    parse_iso,
    parse_swap_date,
    to_decimal,
)
from app.services.swap_client import SwapClient
from app.services.sync_base import PagedSync, SyncResult

logger = get_logger(__name__)

MONEY_FIELDS = (
    "total",
    "handling_fee",
    "shop_now_revenue",
    "shop_later_revenue",
    "exchange_revenue",
    "refund_revenue",
    "total_additional_payment",
    "total_credit_exchange_value",
    "total_refund_value_customer_currency",
)


def map_return(
    node: dict[str, Any],
    store_id: Any,
    shopify_order_id: Optional[str] = None,
) -> dict[str, Any]:
    """Map a SWAP return payload onto ReturnRecord columns."""
    now = datetime.now(timezone.utc)
    types = node.get("type")
    tax = node.get("tax_information") or {}

    data: dict[str, Any] = {
        "store_id": store_id,
        "swap_return_id": normalize_swap(node.get("return_id")),
        "order_name": node.get("order_name"),
        "order_id": normalize_swap(node.get("order_id")) or None,
        "rma": node.get("rma"),
        "shopify_order_id": shopify_order_id,
        "type_string": node.get("type_string"),
        "type": json_list(types) if isinstance(types, list) else node.get("type_string"),
        "status": node.get("return_status"),
        "delivery_status": node.get("delivery_status"),
        "customer_name": node.get("customer_name"),
        "customer_currency": node.get("customer_currency"),
        "customer_locale": node.get("customer_locale"),
        "shipping_carrier": node.get("shipping_carrier"),
        "tracking_number": node.get("tracking_number"),
        "tags": json_list(node.get("tags")),
        "processed": None if node.get("processed") is None else str(node.get("processed")),
        "processed_by": node.get("processed_by"),
        "quality_control_status": node.get("quality_control_status"),
        "elapsed_days_purchase_to_return": node.get("elapsed_days_purchase_to_return"),
        "total_tax": to_decimal(tax.get("total_tax"), default=None),
        "total_duty": to_decimal(tax.get("total_duty"), default=None),
        "tax_currency": tax.get("currency"),
        "date_created": parse_swap_date(node.get("date_created")) or now,
        "date_updated": parse_swap_date(node.get("date_updated")) or now,
        "submitted_at": parse_swap_date(node.get("submitted_at")),
        "date_closed": parse_swap_date(node.get("date_closed")),
        "delivered_date": parse_swap_date(node.get("delivered_date")),
        "shopify_order_date": parse_swap_date(node.get("shopify_order_date")),
    }
    for name in MONEY_FIELDS:
        data[name] = to_decimal(node.get(name))
    data.update(extract_addresses(node.get("billing_address"), node.get("shipping_address")))
    return data


def map_return_product(node: dict[str, Any]) -> dict[str, Any]:
    collections = node.get("collection")
    return {
        "product_id": node.get("product_id"),
        "shopify_product_id": node.get("shopify_product_id"),
        "shopify_variant_id": node.get("shopify_variant_id") or None,
        "product_name": node.get("product_name"),
        "variant_name": node.get("variant_name") or None,
        "sku": node.get("sku"),
        "full_sku_description": node.get("full_sku_description") or None,
        "item_count": node.get("item_count") or 0,
        "cost": to_decimal(node.get("cost")),
        "currency": node.get("currency") or None,
        "return_type": node.get("return_type"),
        "order_number": node.get("order_number") or None,
        "original_order_name": node.get("original_order_name") or None,
        "main_reason_id": node.get("main_reason_id") or None,
        "main_reason_text": node.get("main_reason_text") or None,
        "sub_reason_id": node.get("sub_reason_id") or None,
        "sub_reason_text": node.get("sub_reason_text") or None,
        "comments": node.get("comments") or None,
        "vendor": node.get("vendor") or None,
        "collections": json_list(collections) if collections else None,
        "product_alt_type": node.get("product_alt_type") or None,
        "grams": node.get("grams") or None,
        "intake_reason": node.get("intake_reason") or None,
        "tags": json_list(node.get("tags")) or None,
        "is_faulty": bool(node.get("is_faulty")),
    }


def map_return_reason(node: dict[str, Any]) -> dict[str, Any]:
    return {
        "reason": node.get("reason") or "Unknown",
        "item_count": node.get("item_count") or 0,
    }


class ReturnSync(PagedSync):
    """Upsert SWAP returns and pre-link them to already-synced Shopify orders."""

    entity = "Return"
    cursor_paged = False

    def __init__(
        self,
        db: Database,
        settings: Settings,
        client: SwapClient,
        *,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        super().__init__(db, settings, sleep=sleep)
        self.client = client

    def default_from_date(self, store: Store) -> datetime:
        if store.last_sync_at is not None:
            return store.last_sync_at
        return parse_iso(self.settings.swap_default_from_date)

    def record_label(self, record: dict[str, Any]) -> str:
        return str(record.get("rma") or record.get("return_id") or "<unknown>")

    async def fetch_page(
        self,
        store: Store,
        *,
        cursor: Optional[str],
        page_size: int,
        from_date: datetime,
        to_date: Optional[datetime],
    ) -> Page:
        return await self.client.fetch_returns(
            store=store.external_id,
            from_date=from_date,
            to_date=to_date or datetime.now(timezone.utc),
            page=int(cursor) if cursor else 1,
            items_per_page=page_size,
        )

    async def process_record(
        self,
        session: AsyncSession,
        store: Store,
        record: dict[str, Any],
        result: SyncResult,
    ) -> bool:
        returns = ReturnRepository(session)

        shopify_order_id = None
        reference = normalize_swap(record.get("order_id"))
        if reference:
            order = await OrderRepository(session).find_by_reference(reference)
            shopify_order_id = order.shopify_order_id if order else None

        saved, created = await returns.upsert(map_return(record, store.id, shopify_order_id))

        products = [map_return_product(p) for p in record.get("products") or []]
        reasons = [map_return_reason(r) for r in record.get("return_reasons") or []]
        await returns.replace_children(saved.id, products, reasons)
        result.bump("productsProcessed", len(products))
        result.bump("reasonsProcessed", len(reasons))

        logger.debug(
            "Return synced",
            rma=saved.rma,
            swap_return_id=saved.swap_return_id,
            shopify_order_id=shopify_order_id,
            created=created,
        )
        return created
