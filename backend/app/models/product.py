"""
Catalog models - Shopify products, variants and collections.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base

# Many-to-many; rows for a product are replaced wholesale on resync
product_collections = Table(
    "shopify_product_collections",
    Base.metadata,
    Column(
        "product_id",
        Uuid,
        ForeignKey("shopify_products.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "collection_id",
        Uuid,
        ForeignKey("shopify_collections.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Product(Base):
    """Shopify product keyed by its normalized numeric ID."""

    __tablename__ = "shopify_products"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    store_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("stores.id", ondelete="CASCADE"),
        index=True,
    )
    shopify_product_id: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        index=True,
        nullable=False,
    )
    legacy_resource_id: Mapped[Optional[str]] = mapped_column(String(64))

    # Product details
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    handle: Mapped[str] = mapped_column(String(255), index=True)
    status: Mapped[str] = mapped_column(String(50), default="ACTIVE")
    product_type: Mapped[Optional[str]] = mapped_column(String(255))
    vendor: Mapped[Optional[str]] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text)
    description_html: Mapped[Optional[str]] = mapped_column(Text)
    # JSON-encoded list of tags
    tags: Mapped[Optional[str]] = mapped_column(Text)

    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    synced_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Product {self.title[:30]}>"


class ProductVariant(Base):
    """Variant; the set for a product is deleted and recreated on resync."""

    __tablename__ = "shopify_product_variants"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    product_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("shopify_products.id", ondelete="CASCADE"),
        index=True,
    )
    shopify_variant_id: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        index=True,
        nullable=False,
    )
    legacy_resource_id: Mapped[Optional[str]] = mapped_column(String(64))

    title: Mapped[str] = mapped_column(String(500))
    sku: Mapped[Optional[str]] = mapped_column(String(255), index=True)
    barcode: Mapped[Optional[str]] = mapped_column(String(255))
    position: Mapped[int] = mapped_column(Integer, default=1)

    price: Mapped[Decimal] = mapped_column(Numeric(20, 4), nullable=False)
    compare_at_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(20, 4))
    inventory_quantity: Mapped[Optional[int]] = mapped_column(Integer)
    available_for_sale: Mapped[bool] = mapped_column(Boolean, default=True)
    inventory_policy: Mapped[Optional[str]] = mapped_column(String(50))
    taxable: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<ProductVariant {self.title[:30]}>"


class Collection(Base):
    """Shopify collection keyed by its normalized numeric ID."""

    __tablename__ = "shopify_collections"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    store_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("stores.id", ondelete="CASCADE"),
        index=True,
    )
    shopify_collection_id: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        index=True,
        nullable=False,
    )
    legacy_resource_id: Mapped[Optional[str]] = mapped_column(String(64))

    title: Mapped[str] = mapped_column(String(500))
    handle: Mapped[str] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<Collection {self.title[:30]}>"
