"""
Matching engine: reconciles synced SWAP returns against synced Shopify orders.
"""
from dataclasses import asdict, dataclass, field
from typing import Any, Optional
from uuid import UUID

from app.core.database import Database
from app.core.errors import describe_record_error
from app.core.logging import get_logger
from app.repositories.order import OrderRepository
from app.repositories.returns import ReturnRepository

logger = get_logger(__name__)


@dataclass
class MatchOptions:
    batch_size: int = 100
    dry_run: bool = False
    store_id: Optional[UUID] = None


@dataclass
class MatchResult:
    total_processed: int = 0
    successful_matches: int = 0
    not_found: int = 0
    already_matched: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class MatchingEngine:
    """
    Re-runnable reconciliation pass over local data.

    Only unmatched returns that carry an order reference are selected, so
    returns without a reference never count toward `total_processed`.
    No retries: every lookup is local.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    async def match_all(self, options: Optional[MatchOptions] = None) -> MatchResult:
        options = options or MatchOptions()
        result = MatchResult()

        async with self.db.session() as session:
            candidates = await ReturnRepository(session).get_unmatched_batch(
                options.batch_size, options.store_id
            )
            # Plain values so each record can run in its own transaction
            batch = [
                (r.id, r.swap_return_id, r.order_id, r.shopify_order_id, r.order_name)
                for r in candidates
            ]

        result.total_processed = len(batch)
        logger.info(
            "Matching started",
            candidates=len(batch),
            dry_run=options.dry_run,
            store_id=str(options.store_id) if options.store_id else None,
        )

        for record_id, swap_return_id, reference, linked_id, order_name in batch:
            try:
                matched = await self._match_one(
                    record_id, reference, linked_id, order_name, options.dry_run
                )
            except Exception as e:
                result.errors.append(describe_record_error("Return", swap_return_id, e))
                logger.error(
                    "Failed to match return",
                    swap_return_id=swap_return_id,
                    order_id=reference,
                    error=str(e),
                )
                continue

            if matched:
                result.successful_matches += 1
            else:
                result.not_found += 1

        logger.info(
            "Matching completed",
            total_processed=result.total_processed,
            successful=result.successful_matches,
            not_found=result.not_found,
            errors=len(result.errors),
        )
        return result

    async def _match_one(
        self,
        record_id: UUID,
        reference: str,
        linked_id: Optional[str],
        order_name: Optional[str],
        dry_run: bool,
    ) -> bool:
        async with self.db.session() as session:
            orders = OrderRepository(session)
            # Prefer the order resolved at sync time, then the raw reference
            order = await orders.get_by_shopify_id(linked_id) if linked_id else None
            if order is None:
                order = await orders.find_by_reference(reference)
            if order is None:
                logger.warning(
                    "Shopify order not found",
                    return_id=str(record_id),
                    order_id=reference,
                    order_name=order_name,
                )
                return False

            if dry_run:
                logger.info(
                    "[DRY RUN] Would match return to order",
                    return_id=str(record_id),
                    shopify_order_id=order.shopify_order_id,
                    shopify_order_name=order.name,
                )
                return True

            await ReturnRepository(session).mark_matched(record_id, order.shopify_order_id)
            logger.info(
                "Matched return to order",
                return_id=str(record_id),
                shopify_order_id=order.shopify_order_id,
                shopify_order_name=order.name,
                return_order_name=order_name,
            )
            return True

    async def find_unmatched(
        self,
        limit: int = 50,
        store_id: Optional[UUID] = None,
    ) -> list[dict[str, Any]]:
        """Returns whose referenced order is absent locally. Read only."""
        async with self.db.session() as session:
            records = await ReturnRepository(session).find_unmatched_references(limit, store_id)
            return [
                {
                    "swapReturnId": r.swap_return_id,
                    "shopifyOrderId": r.order_id,
                    "orderName": r.order_name,
                    "rma": r.rma,
                    "reason": "shopify_order_not_found",
                }
                for r in records
            ]

    async def stats(self, store_id: Optional[UUID] = None) -> dict[str, int]:
        async with self.db.session() as session:
            counts = await ReturnRepository(session).matching_counts(store_id)
        return {
            "totalSwapReturns": counts["total"],
            "returnsWithShopifyId": counts["with_reference"],
            "matchedReturns": counts["matched"],
            "unmatchedReturns": counts["unmatched"],
        }
