"""
Shopify service - entry point for Shopify syncs and reads.
"""
import asyncio
from typing import Any, Optional
from uuid import UUID

import httpx

from app.core.config import Settings
from app.core.database import Database
from app.models.store import Platform, Store
from app.repositories.order import OrderRepository
from app.services.catalog_sync import CollectionSync, ProductSync
from app.services.http_client import SleepFunc
from app.services.order_sync import OrderSync
from app.services.shopify_client import ShopifyGraphQLClient
from app.services.stores import StoreService
from app.services.sync_base import SyncOptions, SyncResult


class ShopifyService:
    """Builds the client from the store credential and runs the orchestrators."""

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

    def client_for(self, store: Store) -> ShopifyGraphQLClient:
        return ShopifyGraphQLClient.from_settings(
            self.settings,
            store.external_id,
            self.stores.access_token(store),
            transport=self.transport,
            sleep=self.sleep,
        )

    async def sync_orders(self, options: Optional[SyncOptions] = None) -> SyncResult:
        options = options or SyncOptions()
        store = await self.stores.resolve(Platform.SHOPIFY, options.store_id)
        orchestrator = OrderSync(self.db, self.settings, self.client_for(store), sleep=self.sleep)
        return await orchestrator.run(store, options)

    async def sync_products(self, options: Optional[SyncOptions] = None) -> SyncResult:
        options = options or SyncOptions()
        store = await self.stores.resolve(Platform.SHOPIFY, options.store_id)
        orchestrator = ProductSync(self.db, self.settings, self.client_for(store), sleep=self.sleep)
        return await orchestrator.run(store, options)

    async def sync_collections(self, options: Optional[SyncOptions] = None) -> SyncResult:
        options = options or SyncOptions()
        store = await self.stores.resolve(Platform.SHOPIFY, options.store_id)
        orchestrator = CollectionSync(self.db, self.settings, self.client_for(store), sleep=self.sleep)
        return await orchestrator.run(store, options)

    async def test_connection(self) -> bool:
        store = await self.stores.ensure_store(Platform.SHOPIFY)
        return await self.client_for(store).test_connection()

    async def list_orders(
        self,
        *,
        store_id: Optional[UUID] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[Any], int]:
        async with self.db.session() as session:
            return await OrderRepository(session).list_orders(
                store_id=store_id, skip=skip, limit=limit
            )
