"""
Catalog repository for products, variants and collections.
"""
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import delete, insert, select

from app.models.product import Collection, Product, ProductVariant, product_collections
from app.repositories.base import BaseRepository, require_identifier

PRODUCT_MUTABLE_FIELDS = (
    "title",
    "handle",
    "product_type",
    "vendor",
    "description",
    "description_html",
    "status",
    "published_at",
    "tags",
    "updated_at",
)

COLLECTION_MUTABLE_FIELDS = ("title", "handle", "description", "updated_at")


class ProductRepository(BaseRepository[Product]):
    """Repository for the Shopify catalog."""

    model = Product

    async def get_by_shopify_id(self, shopify_product_id: str) -> Optional[Product]:
        require_identifier(shopify_product_id, "Shopify product ID", "Product")
        return await self.get_one_by(Product.shopify_product_id, shopify_product_id)

    async def upsert(self, product_data: dict[str, Any]) -> tuple[Product, bool]:
        """Returns (product, created) tuple."""
        shopify_product_id = require_identifier(
            product_data.get("shopify_product_id"), "Shopify product ID", "Product"
        )
        existing = await self.get_by_shopify_id(shopify_product_id)
        if existing:
            changes = {field: product_data.get(field) for field in PRODUCT_MUTABLE_FIELDS}
            return await self.update(existing, changes, skip_none=False), False
        return await self.create(product_data), True

    # Variants

    async def get_variant_by_shopify_id(self, shopify_variant_id: str) -> Optional[ProductVariant]:
        stmt = select(ProductVariant).where(
            ProductVariant.shopify_variant_id == shopify_variant_id
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def replace_variants(
        self,
        product_id: UUID,
        variants: list[dict[str, Any]],
    ) -> int:
        """Delete every variant of the product and insert the given set."""
        await self.session.execute(
            delete(ProductVariant).where(ProductVariant.product_id == product_id)
        )
        await self.session.flush()
        for variant in variants:
            require_identifier(
                variant.get("shopify_variant_id"), "Shopify variant ID", "ProductVariant"
            )
            self.session.add(ProductVariant(product_id=product_id, **variant))
        await self.session.flush()
        return len(variants)

    async def get_variants(self, product_id: UUID) -> list[ProductVariant]:
        stmt = select(ProductVariant).where(ProductVariant.product_id == product_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    # Collections

    async def get_collection_by_shopify_id(
        self,
        shopify_collection_id: str,
    ) -> Optional[Collection]:
        stmt = select(Collection).where(
            Collection.shopify_collection_id == shopify_collection_id
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert_collection(self, collection_data: dict[str, Any]) -> tuple[Collection, bool]:
        """Returns (collection, created) tuple."""
        shopify_collection_id = require_identifier(
            collection_data.get("shopify_collection_id"),
            "Shopify collection ID",
            "Collection",
        )
        existing = await self.get_collection_by_shopify_id(shopify_collection_id)
        if existing:
            for field in COLLECTION_MUTABLE_FIELDS:
                setattr(existing, field, collection_data.get(field))
            await self.session.flush()
            return existing, False

        collection = Collection(**collection_data)
        self.session.add(collection)
        await self.session.flush()
        return collection, True

    async def clear_collection_links(self, product_id: UUID) -> None:
        await self.session.execute(
            delete(product_collections).where(product_collections.c.product_id == product_id)
        )
        await self.session.flush()

    async def link_collection(self, product_id: UUID, collection_id: UUID) -> None:
        await self.session.execute(
            insert(product_collections).values(
                product_id=product_id,
                collection_id=collection_id,
            )
        )

    async def get_collection_ids(self, product_id: UUID) -> list[UUID]:
        stmt = select(product_collections.c.collection_id).where(
            product_collections.c.product_id == product_id
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
