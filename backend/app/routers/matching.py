"""
Return-to-order matching API routes.
"""
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.core.database import DbHandle
from app.schemas.common import ApiResponse
from app.schemas.matching import MatchingStats, MatchRequest, MatchResultResponse, UnmatchedReturn
from app.services.matching import MatchingEngine

router = APIRouter(prefix="/matching", tags=["matching"])


async def get_matching_engine(db: DbHandle) -> MatchingEngine:
    """Dependency to get the matching engine."""
    return MatchingEngine(db)


EngineDep = Annotated[MatchingEngine, Depends(get_matching_engine)]


@router.post("/swap-shopify", response_model=ApiResponse[MatchResultResponse])
async def match_swap_shopify(
    engine: EngineDep,
    body: Optional[MatchRequest] = None,
) -> ApiResponse[MatchResultResponse]:
    """
    Link unmatched SWAP returns to synced Shopify orders.

    Safe to re-run; with `dryRun` nothing is written and the counts show
    what a real pass would do.
    """
    options = (body or MatchRequest()).to_options()
    result = await engine.match_all(options)
    return ApiResponse(data=MatchResultResponse(**result.to_dict()))


@router.get("/stats", response_model=ApiResponse[MatchingStats])
async def matching_stats(
    engine: EngineDep,
    store_id: Annotated[Optional[UUID], Query(alias="storeId")] = None,
) -> ApiResponse[MatchingStats]:
    return ApiResponse(data=MatchingStats(**await engine.stats(store_id)))


@router.get("/unmatched", response_model=ApiResponse[list[UnmatchedReturn]])
async def unmatched_returns(
    engine: EngineDep,
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
    store_id: Annotated[Optional[UUID], Query(alias="storeId")] = None,
) -> ApiResponse[list[UnmatchedReturn]]:
    """Returns whose referenced order has not been synced."""
    rows = await engine.find_unmatched(limit, store_id)
    return ApiResponse(data=[UnmatchedReturn(**row) for row in rows])
