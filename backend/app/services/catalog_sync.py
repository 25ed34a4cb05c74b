"""
Catalog sync: Shopify products (with variants and collection links) and collections.
"""
import asyncio
import json
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.database import Database
from app.core.logging import get_logger
from app.models.store import Store
from app.repositories.product import ProductRepository
from app.services.http_client import Page, SleepFunc
from app.services.identifiers import normalize
from app.services.parsing import format_shopify_query_date, parse_iso, to_decimal
from app.services.shopify_client import ShopifyGraphQLClient
from app.services.sync_base import PagedSync, SyncResult

logger = get_logger(__name__)


def map_product(node: dict[str, Any], store_id: Any) -> dict[str, Any]:
    tags = node.get("tags")
    return {
        "store_id": store_id,
        "shopify_product_id": normalize(node.get("id"), "Product"),
        "legacy_resource_id": node.get("legacyResourceId"),
        "title": node.get("title") or "",
        "handle": node.get("handle") or "",
        "product_type": node.get("productType") or None,
        "vendor": node.get("vendor") or None,
        "description": node.get("description") or None,
        "description_html": node.get("descriptionHtml") or None,
        "status": node.get("status") or "ACTIVE",
        "published_at": parse_iso(node.get("publishedAt")),
        "tags": json.dumps(tags) if tags else None,
        "created_at": parse_iso(node.get("createdAt")),
        "updated_at": parse_iso(node.get("updatedAt") or node.get("createdAt")),
    }


def map_variant(node: dict[str, Any]) -> dict[str, Any]:
    return {
        "shopify_variant_id": normalize(node.get("id"), "ProductVariant"),
        "legacy_resource_id": node.get("legacyResourceId"),
        "title": node.get("title") or "",
        "sku": node.get("sku") or None,
        "barcode": node.get("barcode") or None,
        "position": node.get("position") or 1,
        "price": to_decimal(node.get("price")),
        "compare_at_price": to_decimal(node.get("compareAtPrice"), default=None),
        "inventory_quantity": node.get("inventoryQuantity"),
        "available_for_sale": bool(node.get("availableForSale", True)),
        "inventory_policy": node.get("inventoryPolicy"),
        "taxable": bool(node.get("taxable", True)),
        "created_at": parse_iso(node.get("createdAt")),
        "updated_at": parse_iso(node.get("updatedAt") or node.get("createdAt")),
    }


def map_collection(node: dict[str, Any], store_id: Any) -> dict[str, Any]:
    return {
        "store_id": store_id,
        "shopify_collection_id": normalize(node.get("id"), "Collection"),
        "legacy_resource_id": node.get("legacyResourceId"),
        "title": node.get("title") or "",
        "handle": node.get("handle") or "",
        "description": node.get("description") or None,
        "updated_at": parse_iso(node.get("updatedAt")),
    }


class _ShopifySync(PagedSync):
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

    def record_label(self, record: dict[str, Any]) -> str:
        return str(record.get("title") or record.get("id") or "<unknown>")


class ProductSync(_ShopifySync):
    """Upsert products, recreate their variants and relink collections."""

    entity = "Product"

    async def fetch_page(
        self,
        store: Store,
        *,
        cursor: Optional[str],
        page_size: int,
        from_date: datetime,
        to_date: Optional[datetime],
    ) -> Page:
        return await self.client.fetch_products(
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
        products = ProductRepository(session)
        product, created = await products.upsert(map_product(record, store.id))

        variants = [map_variant(node) for node in (record.get("variants") or {}).get("nodes") or []]
        count = await products.replace_variants(product.id, variants)
        result.bump("variantsProcessed", count)

        collections = (record.get("collections") or {}).get("nodes") or []
        await self._relink_collections(products, product.id, store.id, collections, result)
        return created

    async def _relink_collections(
        self,
        products: ProductRepository,
        product_id: UUID,
        store_id: UUID,
        collections: list[dict[str, Any]],
        result: SyncResult,
    ) -> None:
        """Replace the product's collection links; failures are logged, not counted."""
        await products.clear_collection_links(product_id)
        linked: set[UUID] = set()

        for node in collections:
            try:
                async with products.session.begin_nested():
                    shopify_collection_id = normalize(node.get("id"), "Collection")
                    collection = await products.get_collection_by_shopify_id(shopify_collection_id)
                    if collection is None:
                        collection, _ = await products.upsert_collection(map_collection(node, store_id))
                        result.bump("collectionsCreated")
                    if collection.id in linked:
                        continue
                    await products.link_collection(product_id, collection.id)
                    linked.add(collection.id)
            except SQLAlchemyError as e:
                logger.warning(
                    "Failed to link product to collection",
                    product_id=str(product_id),
                    collection_id=node.get("id"),
                    collection_title=node.get("title"),
                    error=str(e),
                )


class CollectionSync(_ShopifySync):
    """Upsert collections on their own, filtered by update time."""

    entity = "Collection"

    async def fetch_page(
        self,
        store: Store,
        *,
        cursor: Optional[str],
        page_size: int,
        from_date: datetime,
        to_date: Optional[datetime],
    ) -> Page:
        return await self.client.fetch_collections(
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
        _, created = await ProductRepository(session).upsert_collection(
            map_collection(record, store.id)
        )
        return created
