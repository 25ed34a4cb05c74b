"""
Return analytics - thin aggregates over synced returns and orders.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional
from uuid import UUID

from app.core.database import Database
from app.repositories.order import OrderRepository
from app.repositories.returns import ReturnRepository

PERCENT = Decimal("0.01")


@dataclass
class AnalyticsFilter:
    store_id: Optional[UUID] = None
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None

    def as_kwargs(self) -> dict[str, Any]:
        return {"store_id": self.store_id, "from_date": self.from_date, "to_date": self.to_date}


def rate(numerator: Decimal, denominator: Decimal) -> Decimal:
    """Percentage rounded to two places; zero when nothing to divide by."""
    if not denominator:
        return Decimal("0.00")
    return (numerator / denominator * 100).quantize(PERCENT, rounding=ROUND_HALF_UP)


class ReturnsAnalytics:
    """Read-only aggregates used by the analytics endpoints."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def total_refunds(self, filters: AnalyticsFilter) -> dict[str, Any]:
        async with self.db.session() as session:
            amount, count = await ReturnRepository(session).total_refunds(**filters.as_kwargs())
        return {"totalRefundAmount": amount, "refundCount": count}

    async def returns_by_product(self, filters: AnalyticsFilter) -> list[dict[str, Any]]:
        async with self.db.session() as session:
            rows = await ReturnRepository(session).returns_by_product(**filters.as_kwargs())
        return [
            {
                "productId": row["product_id"],
                "sku": row["sku"],
                "productName": row["product_name"],
                "itemCount": int(row["item_count"] or 0),
                "totalCost": Decimal(str(row["total_cost"] or 0)),
                "returnCount": int(row["return_count"] or 0),
            }
            for row in rows
        ]

    async def return_reasons(self, filters: AnalyticsFilter) -> list[dict[str, Any]]:
        async with self.db.session() as session:
            rows = await ReturnRepository(session).return_reasons(**filters.as_kwargs())
        return [
            {
                "reason": row["reason"],
                "itemCount": int(row["item_count"] or 0),
                "occurrences": int(row["occurrences"] or 0),
            }
            for row in rows
        ]

    async def return_rates(self, filters: AnalyticsFilter) -> dict[str, Any]:
        """Refund count and value relative to PAID orders."""
        async with self.db.session() as session:
            refund_amount, refund_count = await ReturnRepository(session).total_refunds(
                **filters.as_kwargs()
            )
            order_count, revenue = await OrderRepository(session).paid_order_totals(
                **filters.as_kwargs()
            )
        return {
            "refundCount": refund_count,
            "paidOrderCount": order_count,
            "refundAmount": refund_amount,
            "paidRevenue": revenue,
            "returnRateByCount": rate(Decimal(refund_count), Decimal(order_count)),
            "returnRateByValue": rate(refund_amount, revenue),
        }
