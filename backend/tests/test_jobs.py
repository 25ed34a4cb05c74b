"""
Tests for the scheduled worker jobs.
"""
from app.services.job_queue import (
    WorkerSettings,
    match_returns_job,
    sync_orders_job,
    sync_returns_job,
)
from factories import seed_order, seed_return


async def test_syncs_skip_when_disabled(db, settings):
    ctx = {"db": db, "settings": settings.model_copy(update={"scheduled_sync_enabled": False})}

    assert await sync_orders_job(ctx) == {"skipped": True}
    assert await sync_returns_job(ctx) == {"skipped": True}


async def test_match_job_reconciles(db, settings, shopify_store, swap_store):
    await seed_order(db, shopify_store.id, 5001)
    await seed_return(db, swap_store.id, "r1", order_id="5001")

    result = await match_returns_job({"db": db, "settings": settings})

    assert result["successful_matches"] == 1
    assert result["total_processed"] == 1


def test_worker_registers_cron_jobs():
    assert len(WorkerSettings.cron_jobs) == 3
    assert match_returns_job in WorkerSettings.functions
