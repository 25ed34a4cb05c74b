"""
Services package for business logic layer.
"""
from app.services.matching import MatchingEngine, MatchOptions, MatchResult
from app.services.returns_analytics import ReturnsAnalytics
from app.services.shopify_client import ShopifyGraphQLClient
from app.services.shopify_service import ShopifyService
from app.services.swap_client import SwapClient
from app.services.swap_service import SwapService
from app.services.sync_base import SyncOptions, SyncResult

__all__ = [
    "ShopifyGraphQLClient",
    "SwapClient",
    "ShopifyService",
    "SwapService",
    "SyncOptions",
    "SyncResult",
    "MatchingEngine",
    "MatchOptions",
    "MatchResult",
    "ReturnsAnalytics",
]
