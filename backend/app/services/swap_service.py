"""
SWAP service - entry point for returns syncs and reads.
"""
import asyncio
from typing import Any, Optional
from uuid import UUID

import httpx

from app.core.config import Settings
from app.core.database import Database
from app.core.errors import AppError
from app.models.returns import ReturnRecord
from app.models.store import Platform, Store
from app.repositories.returns import ReturnRepository
from app.services.http_client import SleepFunc
from app.services.return_sync import ReturnSync
from app.services.stores import StoreService
from app.services.swap_client import SwapClient
from app.services.sync_base import SyncOptions, SyncResult


class SwapService:
    """Builds the SWAP client from the store credential and runs the returns sync."""

    def __init__(
        self,
        db: Database,
        settings: Settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self.db = db
        self.settings = settings
        self.transport = transport
        self.sleep = sleep
        self.stores = StoreService(db, settings)

    def client_for(self, store: Store) -> SwapClient:
        return SwapClient.from_settings(
            self.settings,
            self.stores.access_token(store),
            transport=self.transport,
            sleep=self.sleep,
        )

    async def sync_returns(self, options: Optional[SyncOptions] = None) -> SyncResult:
        options = options or SyncOptions()
        store = await self.stores.resolve(Platform.SWAP, options.store_id)
        orchestrator = ReturnSync(self.db, self.settings, self.client_for(store), sleep=self.sleep)
        return await orchestrator.run(store, options)

    async def test_connection(self) -> bool:
        store = await self.stores.ensure_store(Platform.SWAP)
        return await self.client_for(store).test_connection(store.external_id)

    async def list_returns(self, **filters: Any) -> tuple[list[ReturnRecord], int]:
        async with self.db.session() as session:
            return await ReturnRepository(session).list_returns(**filters)

    async def get_return(self, return_id: UUID) -> dict[str, Any]:
        """A return with its products and reasons, or 404."""
        async with self.db.session() as session:
            returns = ReturnRepository(session)
            record = await returns.get_by_id(return_id)
            if record is None:
                raise AppError(f"Return not found: {return_id}", status_code=404)
            return {
                "record": record,
                "products": await returns.get_products(record.id),
                "reasons": await returns.get_reasons(record.id),
            }
