"""
Tests for return analytics aggregates.
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.services.returns_analytics import AnalyticsFilter, ReturnsAnalytics, rate
from factories import return_product_node, seed_order, seed_return


@pytest.fixture
def analytics(db) -> ReturnsAnalytics:
    return ReturnsAnalytics(db)


@pytest.fixture
async def seeded(db, shopify_store, swap_store):
    for i in range(4):
        await seed_order(db, shopify_store.id, 5000 + i, total="100.00")
    await seed_order(db, shopify_store.id, 6000, total="80.00", financial_status="PENDING")

    await seed_return(
        db, swap_store.id, "r1", refund="50.00",
        products=[return_product_node("P1", cost="50.00")],
        reasons=[{"reason": "Too small", "item_count": 1}],
    )
    await seed_return(
        db, swap_store.id, "r2", refund="30.00", status="Open",
        products=[return_product_node("P1"), return_product_node("P2", item_count=2)],
        reasons=[{"reason": "Too small", "item_count": 1}, {"reason": "Damaged", "item_count": 2}],
    )
    await seed_return(db, swap_store.id, "r3", type_string="Exchange", refund="0", products=[], reasons=[])


class TestRate:
    def test_rounds_half_up(self):
        assert rate(Decimal("1"), Decimal("8")) == Decimal("12.50")
        assert rate(Decimal("1"), Decimal("3")) == Decimal("33.33")
        assert rate(Decimal("2"), Decimal("3")) == Decimal("66.67")

    def test_zero_denominator(self):
        assert rate(Decimal("5"), Decimal("0")) == Decimal("0.00")


class TestReturnsAnalytics:
    async def test_total_refunds_counts_closed_refunds_only(self, analytics, seeded):
        totals = await analytics.total_refunds(AnalyticsFilter())

        assert totals["refundCount"] == 1
        assert totals["totalRefundAmount"] == Decimal("50")

    async def test_returns_by_product(self, analytics, seeded):
        rows = {row["productId"]: row for row in await analytics.returns_by_product(AnalyticsFilter())}

        assert rows["P1"]["itemCount"] == 2
        assert rows["P1"]["returnCount"] == 2
        assert rows["P1"]["totalCost"] == Decimal("100")
        assert rows["P2"]["itemCount"] == 2

    async def test_return_reasons(self, analytics, seeded):
        rows = {row["reason"]: row for row in await analytics.return_reasons(AnalyticsFilter())}

        assert rows["Too small"] == {"reason": "Too small", "itemCount": 2, "occurrences": 2}
        assert rows["Damaged"]["itemCount"] == 2

    async def test_return_rates(self, analytics, seeded):
        rates = await analytics.return_rates(AnalyticsFilter())

        assert rates["paidOrderCount"] == 4
        assert rates["paidRevenue"] == Decimal("400")
        assert rates["returnRateByCount"] == Decimal("25.00")
        assert rates["returnRateByValue"] == Decimal("12.50")

    async def test_date_window_excludes_everything(self, analytics, seeded):
        window = AnalyticsFilter(
            from_date=datetime(2020, 1, 1, tzinfo=timezone.utc),
            to_date=datetime(2020, 12, 31, tzinfo=timezone.utc),
        )

        rates = await analytics.return_rates(window)

        assert rates["refundCount"] == 0
        assert rates["paidOrderCount"] == 0
        assert rates["returnRateByCount"] == Decimal("0.00")
