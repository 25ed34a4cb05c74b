"""
Pydantic schemas package.
"""
from app.schemas.common import ApiResponse, Pagination
from app.schemas.matching import (
    MatchingStats,
    MatchRequest,
    MatchResultResponse,
    UnmatchedReturn,
)
from app.schemas.orders import OrderResponse, PaginatedOrdersResponse
from app.schemas.returns import (
    PaginatedReturnsResponse,
    ProductReturns,
    ReasonCount,
    ReturnDetailResponse,
    ReturnRates,
    ReturnResponse,
    TotalRefunds,
)
from app.schemas.sync import ConnectionStatus, SyncRequest, SyncResultResponse

__all__ = [
    # Common
    "ApiResponse",
    "Pagination",
    # Sync
    "SyncRequest",
    "SyncResultResponse",
    "ConnectionStatus",
    # Matching
    "MatchRequest",
    "MatchResultResponse",
    "MatchingStats",
    "UnmatchedReturn",
    # Orders
    "OrderResponse",
    "PaginatedOrdersResponse",
    # Returns
    "ReturnResponse",
    "ReturnDetailResponse",
    "PaginatedReturnsResponse",
    "TotalRefunds",
    "ProductReturns",
    "ReasonCount",
    "ReturnRates",
]
