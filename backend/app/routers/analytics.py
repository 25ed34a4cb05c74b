"""
Return analytics API endpoints.

Aggregates are computed from locally synced data only; run the syncs first.
"""
from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.core.database import DbHandle
from app.schemas.common import ApiResponse
from app.schemas.returns import ProductReturns, ReasonCount, ReturnRates, TotalRefunds
from app.services.returns_analytics import AnalyticsFilter, ReturnsAnalytics

router = APIRouter(prefix="/analytics", tags=["analytics"])


async def get_analytics(db: DbHandle) -> ReturnsAnalytics:
    return ReturnsAnalytics(db)


async def get_filter(
    store_id: Annotated[Optional[UUID], Query(alias="storeId")] = None,
    from_date: Annotated[Optional[datetime], Query(alias="fromDate")] = None,
    to_date: Annotated[Optional[datetime], Query(alias="toDate")] = None,
) -> AnalyticsFilter:
    return AnalyticsFilter(store_id=store_id, from_date=from_date, to_date=to_date)


AnalyticsDep = Annotated[ReturnsAnalytics, Depends(get_analytics)]
FilterDep = Annotated[AnalyticsFilter, Depends(get_filter)]


@router.get("/refunds", response_model=ApiResponse[TotalRefunds])
async def total_refunds(analytics: AnalyticsDep, filters: FilterDep) -> ApiResponse[TotalRefunds]:
    """Sum of closed refund-type returns."""
    return ApiResponse(data=TotalRefunds(**await analytics.total_refunds(filters)))


@router.get("/returns-by-product", response_model=ApiResponse[list[ProductReturns]])
async def returns_by_product(
    analytics: AnalyticsDep,
    filters: FilterDep,
) -> ApiResponse[list[ProductReturns]]:
    """Returned item counts and cost per product, most returned first."""
    rows = await analytics.returns_by_product(filters)
    return ApiResponse(data=[ProductReturns(**row) for row in rows])


@router.get("/reasons", response_model=ApiResponse[list[ReasonCount]])
async def return_reasons(analytics: AnalyticsDep, filters: FilterDep) -> ApiResponse[list[ReasonCount]]:
    rows = await analytics.return_reasons(filters)
    return ApiResponse(data=[ReasonCount(**row) for row in rows])


@router.get("/return-rates", response_model=ApiResponse[ReturnRates])
async def return_rates(analytics: AnalyticsDep, filters: FilterDep) -> ApiResponse[ReturnRates]:
    """
    Refunds relative to paid orders, by count and by value.

    Rates are percentages rounded to two places and are zero when there
    are no paid orders in the window.
    """
    return ApiResponse(data=ReturnRates(**await analytics.return_rates(filters)))
