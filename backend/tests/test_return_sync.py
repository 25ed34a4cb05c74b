"""
Tests for the SWAP returns sync orchestrator.
"""
import json
from datetime import datetime
from decimal import Decimal

import pytest

from app.repositories.returns import ReturnRepository
from app.services.return_sync import ReturnSync, map_return
from app.services.sync_base import SyncOptions
from factories import return_node, return_product_node, seed_order


@pytest.fixture
def return_sync(db, settings, swap_client, sleeper) -> ReturnSync:
    return ReturnSync(db, settings, swap_client, sleep=sleeper)


class TestMapReturn:
    def test_maps_dates_money_and_addresses(self):
        data = map_return(return_node("r1", order_id="5001", refund="49.95"), store_id="store")

        assert data["swap_return_id"] == "r1"
        assert data["order_id"] == "5001"
        assert data["total_refund_value_customer_currency"] == Decimal("49.95")
        assert data["handling_fee"] == Decimal("0")
        assert data["shop_now_revenue"] == Decimal("0")
        assert data["date_created"].replace(tzinfo=None) == datetime(2025, 9, 23, 14, 52, 21)
        assert data["date_closed"] is None
        assert data["delivered_date"] is None
        assert data["billing_state_province"] == "TX"
        assert data["shipping_postcode"] == "73301"
        assert json.loads(data["type"]) == ["Refund"]
        assert data["total_tax"] == Decimal("4.00")
        assert data["total_duty"] is None

    def test_missing_order_reference_is_null(self):
        assert map_return(return_node("r1", order_id=""), store_id="s")["order_id"] is None


class TestReturnSync:
    """Tests for ReturnSync.run."""

    async def test_creates_returns_with_children(self, db, return_sync, swap_api, swap_store):
        swap_api.add_page(
            [
                return_node(
                    "r1",
                    products=[return_product_node("P1"), return_product_node("P2", item_count=2)],
                    reasons=[{"reason": "Too small", "item_count": 1}, {"reason": "Damaged", "item_count": 2}],
                ),
                return_node("r2"),
            ]
        )

        result = await return_sync.run(swap_store)

        assert result.success is True
        assert result.created == 2
        assert result.details["productsProcessed"] == 3
        assert result.details["reasonsProcessed"] == 3

        async with db.session() as session:
            returns = ReturnRepository(session)
            record = await returns.get_by_swap_id("r1")
            assert record.rma == "RMA-r1"
            assert record.is_matched is False
            assert len(await returns.get_products(record.id)) == 2
            assert {r.reason for r in await returns.get_reasons(record.id)} == {"Too small", "Damaged"}

    async def test_request_uses_store_and_default_from_date(self, return_sync, swap_api, swap_store):
        await return_sync.run(swap_store)

        url = str(swap_api.requests[0].url)
        assert "store=test-store" in url
        assert "from_date=2024-01-01T00:00:00Z" in url
        assert "page=1" in url
        assert "items_per_page=50" in url

    async def test_pages_by_number(self, return_sync, swap_api, swap_store, sleeper):
        swap_api.add_page([return_node(f"a{i}") for i in range(50)], has_next_page=True)
        swap_api.add_page([return_node("b1")])

        result = await return_sync.run(swap_store)

        assert result.processed == 51
        assert "page=2" in str(swap_api.requests[1].url)
        assert sleeper.calls == [1.0]

    async def test_limit_keeps_page_size_across_pages(self, db, return_sync, swap_api, swap_store):
        swap_api.serve([return_node(f"r{i:03d}") for i in range(1, 101)])

        result = await return_sync.run(swap_store, SyncOptions(limit=60))

        assert result.processed == 60
        assert result.created == 60
        assert result.updated == 0
        assert len(swap_api.requests) == 2
        assert all(r.url.params["items_per_page"] == "50" for r in swap_api.requests)

        async with db.session() as session:
            returns = ReturnRepository(session)
            assert await returns.count() == 60
            assert await returns.get_by_swap_id("r060") is not None
            assert await returns.get_by_swap_id("r061") is None

    async def test_small_limit_sets_page_size(self, return_sync, swap_api, swap_store):
        swap_api.serve([return_node(f"r{i:03d}") for i in range(1, 101)])

        result = await return_sync.run(swap_store, SyncOptions(limit=10))

        assert result.processed == 10
        assert len(swap_api.requests) == 1
        assert swap_api.requests[0].url.params["items_per_page"] == "10"

    async def test_prelinks_known_orders(self, db, return_sync, swap_api, swap_store, shopify_store):
        await seed_order(db, shopify_store.id, 5001)
        swap_api.add_page([return_node("r1", order_id="5001"), return_node("r2", order_id="9999")])

        await return_sync.run(swap_store)

        async with db.session() as session:
            returns = ReturnRepository(session)
            linked = await returns.get_by_swap_id("r1")
            unlinked = await returns.get_by_swap_id("r2")
        assert linked.shopify_order_id == "5001"
        assert linked.is_matched is False
        assert unlinked.shopify_order_id is None

    async def test_resync_keeps_match_state(self, db, return_sync, swap_api, swap_store):
        swap_api.add_page([return_node("r1", order_id="5001", status="Open")])
        await return_sync.run(swap_store)

        async with db.session() as session:
            returns = ReturnRepository(session)
            record = await returns.get_by_swap_id("r1")
            await returns.mark_matched(record.id, "5001")

        swap_api.add_page([return_node("r1", order_id="5001", status="Closed")])
        result = await return_sync.run(swap_store, SyncOptions(limit=10))

        assert result.updated == 1
        async with db.session() as session:
            record = await ReturnRepository(session).get_by_swap_id("r1")
        assert record.status == "Closed"
        assert record.is_matched is True
        assert record.shopify_order_id == "5001"

    async def test_bad_record_is_reported(self, db, return_sync, swap_api, swap_store):
        swap_api.add_page([return_node("r1"), return_node("", rma="RMA-bad"), return_node("r3")])

        result = await return_sync.run(swap_store)

        assert result.processed == 2
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Return RMA-bad:")
