"""
Order repository for data access operations.
"""
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import delete, func, or_, select

from app.core.errors import RecordValidationError
from app.models.order import Order, OrderLineItem
from app.repositories.base import BaseRepository, require_identifier

# Status fields refreshed on resync; identity fields are never touched
ORDER_MUTABLE_FIELDS = (
    "display_financial_status",
    "display_fulfillment_status",
    "confirmed",
    "closed",
    "cancelled_at",
    "cancel_reason",
    "current_total_price_amount",
    "current_total_price_presentment_amount",
    "current_subtotal_price_amount",
    "current_subtotal_price_presentment_amount",
    "current_total_tax_amount",
    "current_total_tax_presentment_amount",
)


def reference_matches(reference: Any) -> Any:
    """
    Criterion for an order identified by a foreign reference.

    SWAP stores either the numeric order ID or the order name; `reference`
    may be a literal or a correlated column.
    """
    return or_(
        Order.shopify_order_id == reference,
        Order.legacy_resource_id == reference,
        Order.name == reference,
    )


class OrderRepository(BaseRepository[Order]):
    """Repository for Order and OrderLineItem operations."""

    model = Order

    async def get_by_shopify_id(self, shopify_order_id: str) -> Optional[Order]:
        """Get an order by its normalized Shopify ID."""
        require_identifier(shopify_order_id, "Shopify order ID", "Order")
        return await self.get_one_by(Order.shopify_order_id, shopify_order_id)

    async def find_by_reference(self, reference: str) -> Optional[Order]:
        """Find an order whose ID, legacy resource ID or name equals a foreign reference."""
        stmt = (
            select(Order)
            .where(reference_matches(reference))
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def upsert(self, order_data: dict[str, Any]) -> tuple[Order, bool]:
        """
        Create the order or refresh its status and totals in place.
        Returns (order, created) tuple.
        """
        shopify_order_id = require_identifier(
            order_data.get("shopify_order_id"), "Shopify order ID", "Order"
        )
        if order_data.get("store_id") is None:
            raise RecordValidationError("Order is missing required store ID")

        existing = await self.get_by_shopify_id(shopify_order_id)
        if existing:
            changes = {field: order_data.get(field) for field in ORDER_MUTABLE_FIELDS}
            order = await self.update(existing, changes, skip_none=False)
            return order, False

        return await self.create(order_data), True

    async def replace_line_items(
        self,
        order_id: UUID,
        line_items: list[dict[str, Any]],
    ) -> int:
        """Delete every line item of the order and insert the given set."""
        await self.session.execute(
            delete(OrderLineItem).where(OrderLineItem.order_id == order_id)
        )
        for item in line_items:
            self.session.add(OrderLineItem(order_id=order_id, **item))
        await self.session.flush()
        return len(line_items)

    async def get_line_items(self, order_id: UUID) -> list[OrderLineItem]:
        stmt = select(OrderLineItem).where(OrderLineItem.order_id == order_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_orders(
        self,
        *,
        store_id: Optional[UUID] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[Order], int]:
        """
        Get orders newest first.
        Returns (orders, total_count) tuple.
        """
        base_query = select(Order)
        if store_id:
            base_query = base_query.where(Order.store_id == store_id)

        count_stmt = select(func.count()).select_from(base_query.subquery())
        total = (await self.session.execute(count_stmt)).scalar() or 0

        stmt = base_query.order_by(Order.created_at.desc()).offset(skip).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def paid_order_totals(
        self,
        *,
        store_id: Optional[UUID] = None,
        from_date: Any = None,
        to_date: Any = None,
    ) -> tuple[int, Decimal]:
        """Count and revenue of PAID orders, used for return rates."""
        stmt = select(
            func.count(Order.id),
            func.coalesce(func.sum(Order.current_total_price_amount), 0),
        ).where(Order.display_financial_status == "PAID")
        if store_id:
            stmt = stmt.where(Order.store_id == store_id)
        if from_date:
            stmt = stmt.where(Order.created_at >= from_date)
        if to_date:
            stmt = stmt.where(Order.created_at <= to_date)

        count, revenue = (await self.session.execute(stmt)).one()
        return int(count or 0), Decimal(str(revenue or 0))
