"""
Return models - SWAP returns with their products and reasons.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base

Money = Numeric(20, 4)


class ReturnRecord(Base):
    """SWAP return, reconciled against Shopify orders by the matching engine."""

    __tablename__ = "swap_returns"
    __table_args__ = (
        Index("ix_swap_returns_is_matched_order_id", "is_matched", "order_id"),
        Index("ix_swap_returns_store_id_date_created", "store_id", "date_created"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    store_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("stores.id", ondelete="CASCADE"),
        index=True,
    )

    # Upsert key
    swap_return_id: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    order_name: Mapped[Optional[str]] = mapped_column(String(255))
    # Order reference as reported by SWAP, not yet validated
    order_id: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    rma: Mapped[Optional[str]] = mapped_column(String(255))

    # Reconciliation
    shopify_order_id: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    is_matched: Mapped[bool] = mapped_column(Boolean, default=False, index=True)

    # Classification
    type_string: Mapped[Optional[str]] = mapped_column(String(255), index=True)
    # JSON-encoded list, e.g. '["Exchange", "Refund"]'
    type: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[Optional[str]] = mapped_column(String(100), index=True)
    delivery_status: Mapped[Optional[str]] = mapped_column(String(100))

    # Financial
    total: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    handling_fee: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    shop_now_revenue: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    shop_later_revenue: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    exchange_revenue: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    refund_revenue: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    total_additional_payment: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    total_credit_exchange_value: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    total_refund_value_customer_currency: Mapped[Decimal] = mapped_column(
        Money, default=Decimal("0")
    )

    # Customer
    customer_name: Mapped[Optional[str]] = mapped_column(String(255))
    customer_currency: Mapped[Optional[str]] = mapped_column(String(3))
    customer_locale: Mapped[Optional[str]] = mapped_column(String(20))

    # Shipping and processing
    shipping_carrier: Mapped[Optional[str]] = mapped_column(String(100))
    tracking_number: Mapped[Optional[str]] = mapped_column(String(255))
    tags: Mapped[Optional[str]] = mapped_column(Text)
    processed: Mapped[Optional[str]] = mapped_column(String(50))
    processed_by: Mapped[Optional[str]] = mapped_column(String(255))
    quality_control_status: Mapped[Optional[str]] = mapped_column(String(100))
    elapsed_days_purchase_to_return: Mapped[Optional[int]] = mapped_column(Integer)

    # Tax
    total_tax: Mapped[Optional[Decimal]] = mapped_column(Money)
    total_duty: Mapped[Optional[Decimal]] = mapped_column(Money)
    tax_currency: Mapped[Optional[str]] = mapped_column(String(3))

    # Denormalized addresses for geographic queries
    billing_city: Mapped[Optional[str]] = mapped_column(String(255))
    billing_state_province: Mapped[Optional[str]] = mapped_column(String(100))
    billing_country_code: Mapped[Optional[str]] = mapped_column(String(10), index=True)
    billing_postcode: Mapped[Optional[str]] = mapped_column(String(20))
    shipping_city: Mapped[Optional[str]] = mapped_column(String(255))
    shipping_state_province: Mapped[Optional[str]] = mapped_column(String(100))
    shipping_country_code: Mapped[Optional[str]] = mapped_column(String(10), index=True)
    shipping_postcode: Mapped[Optional[str]] = mapped_column(String(20))

    # Source timestamps
    date_created: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    date_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    date_closed: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    delivered_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    shopify_order_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<ReturnRecord {self.rma or self.swap_return_id}>"


class ReturnProduct(Base):
    """Product line of a return, including its reason texts."""

    __tablename__ = "swap_products"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    return_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("swap_returns.id", ondelete="CASCADE"),
        index=True,
    )

    product_id: Mapped[Optional[str]] = mapped_column(String(255), index=True)
    shopify_product_id: Mapped[Optional[str]] = mapped_column(String(64))
    shopify_variant_id: Mapped[Optional[str]] = mapped_column(String(64))
    product_name: Mapped[Optional[str]] = mapped_column(String(500))
    variant_name: Mapped[Optional[str]] = mapped_column(String(255))
    sku: Mapped[Optional[str]] = mapped_column(String(255), index=True)
    full_sku_description: Mapped[Optional[str]] = mapped_column(Text)
    item_count: Mapped[int] = mapped_column(Integer, default=0)
    cost: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    currency: Mapped[Optional[str]] = mapped_column(String(3))
    return_type: Mapped[Optional[str]] = mapped_column(String(100), index=True)

    order_number: Mapped[Optional[str]] = mapped_column(String(64))
    original_order_name: Mapped[Optional[str]] = mapped_column(String(255))

    main_reason_id: Mapped[Optional[str]] = mapped_column(String(100))
    main_reason_text: Mapped[Optional[str]] = mapped_column(String(500), index=True)
    sub_reason_id: Mapped[Optional[str]] = mapped_column(String(100))
    sub_reason_text: Mapped[Optional[str]] = mapped_column(String(500))
    comments: Mapped[Optional[str]] = mapped_column(Text)

    vendor: Mapped[Optional[str]] = mapped_column(String(255))
    # JSON-encoded list of collection names
    collections: Mapped[Optional[str]] = mapped_column(Text)
    product_alt_type: Mapped[Optional[str]] = mapped_column(String(255))
    grams: Mapped[Optional[int]] = mapped_column(Integer)
    intake_reason: Mapped[Optional[str]] = mapped_column(String(500))
    tags: Mapped[Optional[str]] = mapped_column(Text)
    is_faulty: Mapped[bool] = mapped_column(Boolean, default=False)

    def __repr__(self) -> str:
        return f"<ReturnProduct {self.sku}>"


class ReturnReason(Base):
    """Aggregated reason count reported on a return."""

    __tablename__ = "swap_return_reasons"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    return_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("swap_returns.id", ondelete="CASCADE"),
        index=True,
    )
    reason: Mapped[str] = mapped_column(String(500), index=True)
    item_count: Mapped[int] = mapped_column(Integer, default=0)

    def __repr__(self) -> str:
        return f"<ReturnReason {self.reason[:30]}>"
