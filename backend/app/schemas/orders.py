"""
Order schemas for API responses.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import Pagination


class OrderResponse(BaseModel):
    id: UUID
    shopify_order_id: str = Field(alias="shopifyOrderId")
    legacy_resource_id: Optional[str] = Field(None, alias="legacyResourceId")
    name: str
    number: int
    email: Optional[str] = None
    currency_code: str = Field(alias="currencyCode")
    current_total_price_amount: Decimal = Field(alias="currentTotalPriceAmount")
    current_subtotal_price_amount: Decimal = Field(alias="currentSubtotalPriceAmount")
    current_total_tax_amount: Optional[Decimal] = Field(None, alias="currentTotalTaxAmount")
    display_financial_status: Optional[str] = Field(None, alias="displayFinancialStatus")
    display_fulfillment_status: Optional[str] = Field(None, alias="displayFulfillmentStatus")
    cancelled_at: Optional[datetime] = Field(None, alias="cancelledAt")
    created_at: datetime = Field(alias="createdAt")
    processed_at: datetime = Field(alias="processedAt")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class PaginatedOrdersResponse(BaseModel):
    orders: list[OrderResponse]
    pagination: Pagination
