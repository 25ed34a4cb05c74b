"""
SWAP returns sync and read API routes.
"""
from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.core.config import Settings, get_settings
from app.core.database import DbHandle
from app.schemas.common import ApiResponse, Pagination
from app.schemas.returns import (
    PaginatedReturnsResponse,
    ReturnDetailResponse,
    ReturnProductResponse,
    ReturnReasonResponse,
    ReturnResponse,
)
from app.schemas.sync import ConnectionStatus, SyncRequest, SyncResultResponse
from app.services.swap_service import SwapService
from app.services.sync_base import raise_for_result

router = APIRouter(prefix="/swap", tags=["swap"])


async def get_swap_service(
    db: DbHandle,
    settings: Annotated[Settings, Depends(get_settings)],
) -> SwapService:
    """Dependency to get the SWAP service."""
    return SwapService(db, settings)


SwapDep = Annotated[SwapService, Depends(get_swap_service)]


@router.post("/sync/returns", response_model=ApiResponse[SyncResultResponse])
async def sync_returns(
    service: SwapDep,
    body: Optional[SyncRequest] = None,
) -> ApiResponse[SyncResultResponse]:
    """
    Pull returns from SWAP, pre-linking each one to a synced order when
    its reference is already known locally.
    """
    options = (body or SyncRequest()).to_options()
    result = raise_for_result(await service.sync_returns(options))
    return ApiResponse(data=SyncResultResponse.model_validate(result))


@router.get("/test", response_model=ConnectionStatus)
async def test_connection(service: SwapDep) -> ConnectionStatus:
    return ConnectionStatus(connected=await service.test_connection())


@router.get("/returns", response_model=ApiResponse[PaginatedReturnsResponse])
async def list_returns(
    service: SwapDep,
    store_id: Annotated[Optional[UUID], Query(alias="storeId")] = None,
    status: Optional[str] = None,
    type_contains: Annotated[Optional[str], Query(alias="type")] = None,
    from_date: Annotated[Optional[datetime], Query(alias="fromDate")] = None,
    to_date: Annotated[Optional[datetime], Query(alias="toDate")] = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> ApiResponse[PaginatedReturnsResponse]:
    """Synced returns, newest first. `type` matches a substring of the type string."""
    returns, total = await service.list_returns(
        store_id=store_id,
        status=status,
        type_contains=type_contains,
        from_date=from_date,
        to_date=to_date,
        skip=offset,
        limit=limit,
    )
    return ApiResponse(
        data=PaginatedReturnsResponse(
            returns=[ReturnResponse.model_validate(r) for r in returns],
            pagination=Pagination.build(total, limit, offset),
        )
    )


@router.get("/returns/{return_id}", response_model=ApiResponse[ReturnDetailResponse])
async def get_return(return_id: UUID, service: SwapDep) -> ApiResponse[ReturnDetailResponse]:
    """One return with its products and reasons."""
    found = await service.get_return(return_id)
    detail = ReturnDetailResponse.model_validate(found["record"]).model_copy(
        update={
            "products": [ReturnProductResponse.model_validate(p) for p in found["products"]],
            "return_reasons": [ReturnReasonResponse.model_validate(r) for r in found["reasons"]],
        }
    )
    return ApiResponse(data=detail)
