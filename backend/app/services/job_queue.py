"""
ARQ Job Queue Service - Async Redis-based job queue for background tasks.

Provides:
- Scheduled Shopify orders sync
- Scheduled SWAP returns sync
- Scheduled return/order matching
"""
from typing import Any
from urllib.parse import urlparse

from arq import cron
from arq.connections import RedisSettings

from app.core.config import get_settings
from app.core.database import Database
from app.core.logging import configure_logging, get_logger
from app.services.matching import MatchingEngine, MatchOptions
from app.services.shopify_service import ShopifyService
from app.services.swap_service import SwapService

logger = get_logger(__name__)


def get_redis_settings() -> RedisSettings:
    """Get Redis connection settings from config."""
    parsed = urlparse(get_settings().redis_url or "redis://localhost:6379")
    database = int(parsed.path.lstrip("/") or 0)
    return RedisSettings(
        host=parsed.hostname or "localhost",
        port=parsed.port or 6379,
        password=parsed.password,
        database=database,
    )


# ============================================
# WORKER LIFECYCLE
# ============================================

async def startup(ctx: dict) -> None:
    """Each worker process owns its own persistence handle."""
    settings = get_settings()
    configure_logging(settings)
    db = Database.from_settings(settings)
    await db.create_all()
    ctx["settings"] = settings
    ctx["db"] = db
    logger.info("Worker started")


async def shutdown(ctx: dict) -> None:
    db: Database = ctx["db"]
    await db.dispose()
    logger.info("Worker stopped")


# ============================================
# JOB FUNCTIONS
# ============================================

async def sync_orders_job(ctx: dict) -> dict[str, Any]:
    """Incremental Shopify orders sync from the store's last sync time."""
    if not ctx["settings"].scheduled_sync_enabled:
        return {"skipped": True}

    result = await ShopifyService(ctx["db"], ctx["settings"]).sync_orders()
    logger.info(
        "Scheduled orders sync finished",
        success=result.success,
        processed=result.processed,
        errors=len(result.errors),
    )
    return result.to_dict()


async def sync_returns_job(ctx: dict) -> dict[str, Any]:
    """Incremental SWAP returns sync from the store's last sync time."""
    if not ctx["settings"].scheduled_sync_enabled:
        return {"skipped": True}

    result = await SwapService(ctx["db"], ctx["settings"]).sync_returns()
    logger.info(
        "Scheduled returns sync finished",
        success=result.success,
        processed=result.processed,
        errors=len(result.errors),
    )
    return result.to_dict()


async def match_returns_job(ctx: dict) -> dict[str, Any]:
    """Reconcile a batch of unmatched returns."""
    engine = MatchingEngine(ctx["db"])
    result = await engine.match_all(MatchOptions(batch_size=ctx["settings"].match_batch_size))
    return result.to_dict()


# ============================================
# WORKER SETTINGS
# ============================================

class WorkerSettings:
    """ARQ worker configuration."""

    functions = [
        sync_orders_job,
        sync_returns_job,
        match_returns_job,
    ]

    cron_jobs = [
        # Orders hourly, returns a quarter past, matching after both
        cron(sync_orders_job, minute=0),
        cron(sync_returns_job, minute=15),
        cron(match_returns_job, minute=30),
    ]

    on_startup = startup
    on_shutdown = shutdown
    redis_settings = get_redis_settings()

    # Worker settings
    max_jobs = 3
    job_timeout = 1800  # 30 minutes
    keep_result = 3600  # 1 hour
