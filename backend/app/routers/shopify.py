"""
Shopify sync and read API routes.
"""
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.core.config import Settings, get_settings
from app.core.database import DbHandle
from app.core.logging import get_logger
from app.schemas.common import ApiResponse, Pagination
from app.schemas.orders import OrderResponse, PaginatedOrdersResponse
from app.schemas.sync import ConnectionStatus, SyncRequest, SyncResultResponse
from app.services.shopify_service import ShopifyService
from app.services.sync_base import raise_for_result

logger = get_logger(__name__)

router = APIRouter(prefix="/shopify", tags=["shopify"])


async def get_shopify_service(
    db: DbHandle,
    settings: Annotated[Settings, Depends(get_settings)],
) -> ShopifyService:
    """Dependency to get the Shopify service."""
    return ShopifyService(db, settings)


ShopifyDep = Annotated[ShopifyService, Depends(get_shopify_service)]


@router.post("/sync/orders", response_model=ApiResponse[SyncResultResponse])
async def sync_orders(
    service: ShopifyDep,
    body: Optional[SyncRequest] = None,
) -> ApiResponse[SyncResultResponse]:
    """
    Pull orders and their line items from Shopify.

    Partial record failures still return 200 with the errors listed;
    a failed page fetch returns 502 with the counts reached so far.
    """
    options = (body or SyncRequest()).to_options()
    result = raise_for_result(await service.sync_orders(options))
    return ApiResponse(data=SyncResultResponse.model_validate(result))


@router.post("/sync/products", response_model=ApiResponse[SyncResultResponse])
async def sync_products(
    service: ShopifyDep,
    body: Optional[SyncRequest] = None,
) -> ApiResponse[SyncResultResponse]:
    """Pull products with their variants and collection memberships."""
    options = (body or SyncRequest()).to_options()
    result = raise_for_result(await service.sync_products(options))
    return ApiResponse(data=SyncResultResponse.model_validate(result))


@router.post("/sync/collections", response_model=ApiResponse[SyncResultResponse])
async def sync_collections(
    service: ShopifyDep,
    body: Optional[SyncRequest] = None,
) -> ApiResponse[SyncResultResponse]:
    options = (body or SyncRequest()).to_options()
    result = raise_for_result(await service.sync_collections(options))
    return ApiResponse(data=SyncResultResponse.model_validate(result))


@router.get("/test", response_model=ConnectionStatus)
async def test_connection(service: ShopifyDep) -> ConnectionStatus:
    """Check the configured Shopify credentials against the shop query."""
    return ConnectionStatus(connected=await service.test_connection())


@router.get("/orders", response_model=ApiResponse[PaginatedOrdersResponse])
async def list_orders(
    service: ShopifyDep,
    store_id: Annotated[Optional[UUID], Query(alias="storeId")] = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> ApiResponse[PaginatedOrdersResponse]:
    """Synced orders, newest first."""
    orders, total = await service.list_orders(store_id=store_id, skip=offset, limit=limit)
    return ApiResponse(
        data=PaginatedOrdersResponse(
            orders=[OrderResponse.model_validate(o) for o in orders],
            pagination=Pagination.build(total, limit, offset),
        )
    )
