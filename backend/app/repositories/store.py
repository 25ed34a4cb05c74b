"""
Store repository for data access operations.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select

from app.models.store import Store
from app.repositories.base import BaseRepository, require_identifier


class StoreRepository(BaseRepository[Store]):
    """Repository for Store model operations."""

    model = Store

    async def get_by_external_id(self, platform: str, external_id: str) -> Optional[Store]:
        """Get a store by platform and its external domain/account ID."""
        stmt = select(Store).where(
            Store.platform == platform,
            Store.external_id == external_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_or_update(
        self,
        platform: str,
        external_id: str,
        access_token_encrypted: str,
        store_name: Optional[str] = None,
    ) -> tuple[Store, bool]:
        """
        Create a new store or refresh the credential of an existing one.
        Returns (store, created) tuple.
        """
        require_identifier(external_id, "external ID", "Store")
        existing = await self.get_by_external_id(platform, external_id)

        if existing:
            existing.access_token_encrypted = access_token_encrypted
            if store_name:
                existing.store_name = store_name
            await self.session.flush()
            await self.session.refresh(existing)
            return existing, False

        store = Store(
            platform=platform,
            external_id=external_id,
            access_token_encrypted=access_token_encrypted,
            store_name=store_name,
        )
        self.session.add(store)
        await self.session.flush()
        await self.session.refresh(store)
        return store, True

    async def mark_synced(
        self,
        store: Store,
        sync_time: Optional[datetime] = None,
    ) -> Store:
        """Bump the last successful sync timestamp."""
        store.last_sync_at = sync_time or datetime.now(timezone.utc)
        await self.session.flush()
        await self.session.refresh(store)
        return store
