"""
Matching schemas for request/response validation.
"""
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.services.matching import MatchOptions


class MatchRequest(BaseModel):
    """Options for a matching pass."""

    batch_size: int = Field(100, ge=1, le=10000, alias="batchSize")
    dry_run: bool = Field(False, alias="dryRun")
    store_id: Optional[UUID] = Field(None, alias="storeId")

    model_config = ConfigDict(populate_by_name=True)

    def to_options(self) -> MatchOptions:
        return MatchOptions(
            batch_size=self.batch_size,
            dry_run=self.dry_run,
            store_id=self.store_id,
        )


class MatchResultResponse(BaseModel):
    total_processed: int = Field(alias="totalProcessed")
    successful_matches: int = Field(alias="successfulMatches")
    not_found: int = Field(alias="notFound")
    already_matched: int = Field(alias="alreadyMatched")
    errors: list[str]

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class MatchingStats(BaseModel):
    total_swap_returns: int = Field(alias="totalSwapReturns")
    returns_with_shopify_id: int = Field(alias="returnsWithShopifyId")
    matched_returns: int = Field(alias="matchedReturns")
    unmatched_returns: int = Field(alias="unmatchedReturns")

    model_config = ConfigDict(populate_by_name=True)


class UnmatchedReturn(BaseModel):
    swap_return_id: str = Field(alias="swapReturnId")
    shopify_order_id: Optional[str] = Field(None, alias="shopifyOrderId")
    order_name: Optional[str] = Field(None, alias="orderName")
    rma: Optional[str] = None
    reason: str = "shopify_order_not_found"

    model_config = ConfigDict(populate_by_name=True)
