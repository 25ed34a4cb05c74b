"""
Shared pagination loop for the sync orchestrators.

A run fetches pages in cursor order, upserts each record in its own
transaction and keeps going when a single record fails. A failure to fetch
a page ends the run and is reported on the returned result.
"""
import asyncio
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.database import Database
from app.core.errors import RecordValidationError, SyncError, describe_record_error
from app.core.logging import get_logger
from app.models.store import Store
from app.repositories.store import StoreRepository
from app.services.http_client import Page, SleepFunc

logger = get_logger(__name__)

PAGE_SIZE_CAP = 50
MAX_SYNC_LIMIT = 10_000


@dataclass
class SyncOptions:
    store_id: Optional[UUID] = None
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None
    limit: Optional[int] = None


@dataclass
class SyncResult:
    """Outcome of one sync run."""

    processed: int = 0
    created: int = 0
    updated: int = 0
    errors: list[str] = field(default_factory=list)
    # Child entity counters, e.g. variantsProcessed
    details: dict[str, int] = field(default_factory=dict)
    success: bool = True
    message: Optional[str] = None

    def bump(self, key: str, amount: int = 1) -> None:
        self.details[key] = self.details.get(key, 0) + amount

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def raise_for_result(result: SyncResult) -> SyncResult:
    """Turn an aborted run into a SyncError carrying the partial counts."""
    if not result.success:
        raise SyncError(result.message or "Sync failed", result)
    return result


def validate_sync_options(options: SyncOptions, now: Optional[datetime] = None) -> None:
    """Reject out-of-range limits and future start dates before any fetch."""
    if options.limit is not None and not 1 <= options.limit <= MAX_SYNC_LIMIT:
        raise RecordValidationError("Limit must be between 1 and 10,000")
    if options.from_date is not None:
        now = now or datetime.now(timezone.utc)
        from_date = options.from_date
        if from_date.tzinfo is None:
            from_date = from_date.replace(tzinfo=timezone.utc)
        if from_date > now:
            raise RecordValidationError("fromDate cannot be in the future")


class PagedSync(ABC):
    """
    Base orchestrator: subclasses provide `fetch_page` and `process_record`.

    Cursor sources shrink the last request to the remaining limit. Page-number
    sources (`cursor_paged = False`) keep one page size for the whole run,
    since the page offset depends on it; surplus records are dropped instead.

    `process_record` runs inside its own session and returns True when the
    record was created, False when an existing row was updated.
    """

    entity: str = "Record"
    cursor_paged: bool = True

    def __init__(
        self,
        db: Database,
        settings: Settings,
        *,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self.db = db
        self.settings = settings
        self.sleep = sleep
        self.page_size_cap = min(settings.sync_page_size, PAGE_SIZE_CAP)
        self.page_delay = settings.sync_page_delay_seconds

    def default_from_date(self, store: Store) -> datetime:
        """Store's last successful sync, else the configured lookback."""
        if store.last_sync_at is not None:
            return store.last_sync_at
        return datetime.now(timezone.utc) - timedelta(days=self.settings.sync_lookback_days)

    @abstractmethod
    async def fetch_page(
        self,
        store: Store,
        *,
        cursor: Optional[str],
        page_size: int,
        from_date: datetime,
        to_date: Optional[datetime],
    ) -> Page:
        ...

    @abstractmethod
    async def process_record(
        self,
        session: AsyncSession,
        store: Store,
        record: dict[str, Any],
        result: SyncResult,
    ) -> bool:
        ...

    def record_label(self, record: dict[str, Any]) -> str:
        return str(record.get("name") or record.get("id") or "<unknown>")

    async def run(self, store: Store, options: Optional[SyncOptions] = None) -> SyncResult:
        """Drive the page loop for one store."""
        options = options or SyncOptions()
        validate_sync_options(options)

        started_at = datetime.now(timezone.utc)
        from_date = options.from_date or self.default_from_date(store)
        limit = options.limit
        result = SyncResult()
        cursor: Optional[str] = None
        pages = 0

        logger.info(
            "Sync started",
            entity=self.entity,
            store_id=str(store.id),
            from_date=from_date.isoformat(),
            limit=limit,
        )

        page_size = self.page_size_cap
        if limit is not None:
            page_size = min(limit, page_size)

        while True:
            if limit is not None and self.cursor_paged:
                page_size = min(limit - result.processed, self.page_size_cap)

            try:
                page = await self.fetch_page(
                    store,
                    cursor=cursor,
                    page_size=page_size,
                    from_date=from_date,
                    to_date=options.to_date,
                )
            except Exception as e:
                result.success = False
                result.message = f"{self.entity} sync failed: {e}"
                result.errors.append(result.message)
                logger.error(
                    "Sync failed",
                    entity=self.entity,
                    store_id=str(store.id),
                    page=pages + 1,
                    error=str(e),
                    partial_result=result.to_dict(),
                )
                return result

            pages += 1
            nodes = page.nodes
            if limit is not None:
                nodes = nodes[: max(limit - result.processed, 0)]
            for record in nodes:
                await self._process_one(store, record, result)

            logger.debug(
                "Page completed",
                entity=self.entity,
                page=pages,
                records=len(nodes),
                processed=result.processed,
                has_next_page=page.has_next_page,
            )

            if limit is not None and result.processed >= limit:
                logger.info("Limit reached, stopping sync", entity=self.entity, limit=limit)
                break
            if not page.has_next_page:
                break

            cursor = page.cursor
            await self.sleep(self.page_delay)

        async with self.db.session() as session:
            stores = StoreRepository(session)
            stored = await stores.get_by_id(store.id)
            if stored is not None:
                await stores.mark_synced(stored, started_at)

        logger.info(
            "Sync completed",
            entity=self.entity,
            store_id=str(store.id),
            pages=pages,
            processed=result.processed,
            created=result.created,
            updated=result.updated,
            errors=len(result.errors),
        )
        return result

    async def _process_one(self, store: Store, record: dict[str, Any], result: SyncResult) -> None:
        label = self.record_label(record)
        try:
            async with self.db.session() as session:
                created = await self.process_record(session, store, record, result)
        except Exception as e:
            message = describe_record_error(self.entity, label, e)
            result.errors.append(message)
            logger.error(
                "Failed to process record",
                entity=self.entity,
                record=label,
                error=str(e),
            )
            return

        result.processed += 1
        if created:
            result.created += 1
        else:
            result.updated += 1
