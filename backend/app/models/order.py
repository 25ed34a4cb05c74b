"""
Order models - Shopify orders and their line items.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base

Money = Numeric(20, 4)


class Order(Base):
    """Shopify order keyed by its normalized numeric ID."""

    __tablename__ = "shopify_orders"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    store_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("stores.id", ondelete="CASCADE"),
        index=True,
    )

    # Upsert key: numeric tail of the order GID
    shopify_order_id: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        index=True,
        nullable=False,
    )
    legacy_resource_id: Mapped[str] = mapped_column(String(64), index=True)

    # Display; number is best-effort, parsed from name
    number: Mapped[int] = mapped_column(Integer, default=0)
    name: Mapped[str] = mapped_column(String(64), index=True)  # e.g., "#1001"

    email: Mapped[Optional[str]] = mapped_column(String(255))
    phone: Mapped[Optional[str]] = mapped_column(String(64))

    # Financial
    currency_code: Mapped[str] = mapped_column(String(3), default="USD")
    presentment_currency_code: Mapped[str] = mapped_column(String(3), default="USD")
    current_total_price_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    current_total_price_presentment_amount: Mapped[Optional[Decimal]] = mapped_column(Money)
    current_subtotal_price_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    current_subtotal_price_presentment_amount: Mapped[Optional[Decimal]] = mapped_column(Money)
    current_total_tax_amount: Mapped[Optional[Decimal]] = mapped_column(Money)
    current_total_tax_presentment_amount: Mapped[Optional[Decimal]] = mapped_column(Money)

    # Status
    display_financial_status: Mapped[Optional[str]] = mapped_column(String(50), index=True)
    display_fulfillment_status: Mapped[Optional[str]] = mapped_column(String(50))
    confirmed: Mapped[bool] = mapped_column(Boolean, default=False)
    closed: Mapped[bool] = mapped_column(Boolean, default=False)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    cancel_reason: Mapped[Optional[str]] = mapped_column(String(50))
    taxes_included: Mapped[bool] = mapped_column(Boolean, default=False)
    test: Mapped[bool] = mapped_column(Boolean, default=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    processed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    synced_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Order {self.name}>"


class OrderLineItem(Base):
    """Line item; the whole set is replaced whenever its order is resynced."""

    __tablename__ = "shopify_line_items"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    order_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("shopify_orders.id", ondelete="CASCADE"),
        index=True,
    )
    # Internal variant, when the catalog has already been synced
    product_variant_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("shopify_product_variants.id", ondelete="SET NULL"),
        nullable=True,
    )

    shopify_line_item_id: Mapped[str] = mapped_column(String(64), index=True)
    name: Mapped[str] = mapped_column(String(500))
    variant_title: Mapped[Optional[str]] = mapped_column(String(255))
    shopify_product_id: Mapped[Optional[str]] = mapped_column(String(64))
    shopify_variant_id: Mapped[Optional[str]] = mapped_column(String(64))
    sku: Mapped[Optional[str]] = mapped_column(String(255))

    quantity: Mapped[int] = mapped_column(Integer, default=0)
    current_quantity: Mapped[int] = mapped_column(Integer, default=0)
    original_unit_price_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    original_unit_price_presentment_amount: Mapped[Optional[Decimal]] = mapped_column(Money)
    original_total_price_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    original_total_price_presentment_amount: Mapped[Optional[Decimal]] = mapped_column(Money)
    requires_shipping: Mapped[bool] = mapped_column(Boolean, default=True)

    def __repr__(self) -> str:
        return f"<OrderLineItem {self.name[:30]}>"
