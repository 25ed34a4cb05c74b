"""
Return and analytics schemas for API responses.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import Pagination


class ReturnResponse(BaseModel):
    id: UUID
    swap_return_id: str = Field(alias="swapReturnId")
    order_name: Optional[str] = Field(None, alias="orderName")
    order_id: Optional[str] = Field(None, alias="orderId")
    rma: Optional[str] = None
    shopify_order_id: Optional[str] = Field(None, alias="shopifyOrderId")
    is_matched: bool = Field(alias="isMatched")
    type_string: Optional[str] = Field(None, alias="typeString")
    status: Optional[str] = None
    delivery_status: Optional[str] = Field(None, alias="deliveryStatus")
    total: Decimal
    total_refund_value_customer_currency: Decimal = Field(
        alias="totalRefundValueCustomerCurrency"
    )
    customer_name: Optional[str] = Field(None, alias="customerName")
    customer_currency: Optional[str] = Field(None, alias="customerCurrency")
    billing_country_code: Optional[str] = Field(None, alias="billingCountryCode")
    shipping_country_code: Optional[str] = Field(None, alias="shippingCountryCode")
    date_created: datetime = Field(alias="dateCreated")
    date_updated: datetime = Field(alias="dateUpdated")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ReturnProductResponse(BaseModel):
    product_id: Optional[str] = Field(None, alias="productId")
    product_name: Optional[str] = Field(None, alias="productName")
    sku: Optional[str] = None
    item_count: int = Field(alias="itemCount")
    cost: Decimal
    return_type: Optional[str] = Field(None, alias="returnType")
    main_reason_text: Optional[str] = Field(None, alias="mainReasonText")
    sub_reason_text: Optional[str] = Field(None, alias="subReasonText")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ReturnReasonResponse(BaseModel):
    reason: str
    item_count: int = Field(alias="itemCount")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ReturnDetailResponse(ReturnResponse):
    products: list[ReturnProductResponse] = Field(default_factory=list)
    return_reasons: list[ReturnReasonResponse] = Field(
        default_factory=list, alias="returnReasons"
    )


class PaginatedReturnsResponse(BaseModel):
    returns: list[ReturnResponse]
    pagination: Pagination


# Analytics


class TotalRefunds(BaseModel):
    total_refund_amount: Decimal = Field(alias="totalRefundAmount")
    refund_count: int = Field(alias="refundCount")

    model_config = ConfigDict(populate_by_name=True)


class ProductReturns(BaseModel):
    product_id: Optional[str] = Field(None, alias="productId")
    sku: Optional[str] = None
    product_name: Optional[str] = Field(None, alias="productName")
    item_count: int = Field(alias="itemCount")
    total_cost: Decimal = Field(alias="totalCost")
    return_count: int = Field(alias="returnCount")

    model_config = ConfigDict(populate_by_name=True)


class ReasonCount(BaseModel):
    reason: str
    item_count: int = Field(alias="itemCount")
    occurrences: int

    model_config = ConfigDict(populate_by_name=True)


class ReturnRates(BaseModel):
    refund_count: int = Field(alias="refundCount")
    paid_order_count: int = Field(alias="paidOrderCount")
    refund_amount: Decimal = Field(alias="refundAmount")
    paid_revenue: Decimal = Field(alias="paidRevenue")
    return_rate_by_count: Decimal = Field(alias="returnRateByCount")
    return_rate_by_value: Decimal = Field(alias="returnRateByValue")

    model_config = ConfigDict(populate_by_name=True)
