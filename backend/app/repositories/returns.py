"""
Return repository for SWAP returns and the reconciliation flag.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import delete, func, or_, select

from app.models.order import Order
from app.models.returns import ReturnProduct, ReturnReason, ReturnRecord
from app.repositories.base import BaseRepository, require_identifier
from app.repositories.order import reference_matches


class ReturnRepository(BaseRepository[ReturnRecord]):
    """Repository for ReturnRecord and its child rows."""

    model = ReturnRecord

    async def get_by_swap_id(self, swap_return_id: str) -> Optional[ReturnRecord]:
        """Get a return by its SWAP return ID."""
        require_identifier(swap_return_id, "SWAP return ID", "Return")
        return await self.get_one_by(ReturnRecord.swap_return_id, swap_return_id)

    async def upsert(self, return_data: dict[str, Any]) -> tuple[ReturnRecord, bool]:
        """
        Create the return or overwrite its mapped fields in place.
        Returns (record, created) tuple.

        `is_matched` is owned by the matching engine and never reset here.
        """
        swap_return_id = require_identifier(
            return_data.get("swap_return_id"), "SWAP return ID", "Return"
        )
        existing = await self.get_by_swap_id(swap_return_id)
        if existing:
            changes = dict(return_data)
            # Keep a resolution made earlier when the order is not known yet
            if changes.get("shopify_order_id") is None:
                changes.pop("shopify_order_id", None)
            return await self.update(existing, changes, skip_none=False), False
        return await self.create(return_data), True

    async def replace_children(
        self,
        return_id: UUID,
        products: list[dict[str, Any]],
        reasons: list[dict[str, Any]],
    ) -> None:
        """Replace the product and reason rows of a return."""
        await self.session.execute(delete(ReturnProduct).where(ReturnProduct.return_id == return_id))
        await self.session.execute(delete(ReturnReason).where(ReturnReason.return_id == return_id))
        for product in products:
            self.session.add(ReturnProduct(return_id=return_id, **product))
        for reason in reasons:
            self.session.add(ReturnReason(return_id=return_id, **reason))
        await self.session.flush()

    async def get_products(self, return_id: UUID) -> list[ReturnProduct]:
        stmt = select(ReturnProduct).where(ReturnProduct.return_id == return_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_reasons(self, return_id: UUID) -> list[ReturnReason]:
        stmt = select(ReturnReason).where(ReturnReason.return_id == return_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_returns(
        self,
        *,
        store_id: Optional[UUID] = None,
        status: Optional[str] = None,
        type_contains: Optional[str] = None,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[ReturnRecord], int]:
        """
        Get returns newest first with optional filters.
        Returns (returns, total_count) tuple.
        """
        base_query = select(ReturnRecord).where(
            *self._filters(store_id=store_id, from_date=from_date, to_date=to_date)
        )
        if status:
            base_query = base_query.where(ReturnRecord.status == status)
        if type_contains:
            base_query = base_query.where(ReturnRecord.type.contains(type_contains))

        count_stmt = select(func.count()).select_from(base_query.subquery())
        total = (await self.session.execute(count_stmt)).scalar() or 0

        stmt = (
            base_query
            .order_by(ReturnRecord.date_created.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    # Reconciliation

    async def get_unmatched_batch(
        self,
        batch_size: int,
        store_id: Optional[UUID] = None,
    ) -> list[ReturnRecord]:
        """Unmatched returns that carry an order reference, oldest first."""
        stmt = select(ReturnRecord).where(
            ReturnRecord.is_matched.is_(False),
            ReturnRecord.order_id.is_not(None),
        )
        if store_id:
            stmt = stmt.where(ReturnRecord.store_id == store_id)
        stmt = stmt.order_by(ReturnRecord.date_created).limit(batch_size)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def mark_matched(self, record_id: UUID, shopify_order_id: str) -> None:
        """Flag a return as reconciled against a confirmed order."""
        record = await self.session.get(ReturnRecord, record_id)
        if record is None:
            return
        record.is_matched = True
        record.shopify_order_id = shopify_order_id
        await self.session.flush()

    async def find_unmatched_references(
        self,
        limit: int,
        store_id: Optional[UUID] = None,
    ) -> list[ReturnRecord]:
        """Returns whose order reference resolves to no Order row locally."""
        order_exists = (
            select(Order.id)
            .where(
                or_(
                    Order.shopify_order_id == ReturnRecord.shopify_order_id,
                    reference_matches(ReturnRecord.order_id),
                )
            )
            .exists()
        )
        stmt = select(ReturnRecord).where(
            ReturnRecord.order_id.is_not(None),
            ~order_exists,
        )
        if store_id:
            stmt = stmt.where(ReturnRecord.store_id == store_id)
        stmt = stmt.order_by(ReturnRecord.date_created.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def matching_counts(self, store_id: Optional[UUID] = None) -> dict[str, int]:
        scope = [ReturnRecord.store_id == store_id] if store_id else []
        has_reference = ReturnRecord.order_id.is_not(None)
        return {
            "total": await self.count(*scope),
            "with_reference": await self.count(*scope, has_reference),
            "matched": await self.count(*scope, ReturnRecord.is_matched.is_(True)),
            "unmatched": await self.count(
                *scope, has_reference, ReturnRecord.is_matched.is_(False)
            ),
        }

    # Analytics

    def _filters(
        self,
        *,
        store_id: Optional[UUID] = None,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None,
    ) -> list[Any]:
        criteria: list[Any] = []
        if store_id:
            criteria.append(ReturnRecord.store_id == store_id)
        if from_date:
            criteria.append(ReturnRecord.date_created >= from_date)
        if to_date:
            criteria.append(ReturnRecord.date_created <= to_date)
        return criteria

    async def total_refunds(self, **filters: Any) -> tuple[Decimal, int]:
        """Sum of closed refund-type returns in customer currency."""
        stmt = select(
            func.coalesce(func.sum(ReturnRecord.total_refund_value_customer_currency), 0),
            func.count(ReturnRecord.id),
        ).where(
            ReturnRecord.type.contains("Refund"),
            ReturnRecord.status == "Closed",
            *self._filters(**filters),
        )
        amount, count = (await self.session.execute(stmt)).one()
        return Decimal(str(amount or 0)), int(count or 0)

    async def returns_by_product(self, **filters: Any) -> list[dict[str, Any]]:
        item_total = func.coalesce(func.sum(ReturnProduct.item_count), 0)
        stmt = (
            select(
                ReturnProduct.product_id,
                ReturnProduct.sku,
                ReturnProduct.product_name,
                item_total.label("item_count"),
                func.coalesce(func.sum(ReturnProduct.cost), 0).label("total_cost"),
                func.count(ReturnProduct.id).label("return_count"),
            )
            .join(ReturnRecord, ReturnRecord.id == ReturnProduct.return_id)
            .where(*self._filters(**filters))
            .group_by(ReturnProduct.product_id, ReturnProduct.sku, ReturnProduct.product_name)
            .order_by(item_total.desc())
        )
        result = await self.session.execute(stmt)
        return [dict(row._mapping) for row in result]

    async def return_reasons(self, **filters: Any) -> list[dict[str, Any]]:
        item_total = func.coalesce(func.sum(ReturnReason.item_count), 0)
        stmt = (
            select(
                ReturnReason.reason,
                item_total.label("item_count"),
                func.count(ReturnReason.id).label("occurrences"),
            )
            .join(ReturnRecord, ReturnRecord.id == ReturnReason.return_id)
            .where(*self._filters(**filters))
            .group_by(ReturnReason.reason)
            .order_by(item_total.desc())
        )
        result = await self.session.execute(stmt)
        return [dict(row._mapping) for row in result]
