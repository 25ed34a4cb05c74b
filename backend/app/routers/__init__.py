"""
API routers package.
"""
from app.routers.analytics import router as analytics_router
from app.routers.health import router as health_router
from app.routers.matching import router as matching_router
from app.routers.shopify import router as shopify_router
from app.routers.swap import router as swap_router

__all__ = [
    "health_router",
    "shopify_router",
    "swap_router",
    "matching_router",
    "analytics_router",
]
