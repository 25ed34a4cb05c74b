"""
Store resolution from environment credentials.
"""
from typing import Optional
from uuid import UUID

from app.core.config import Settings
from app.core.database import Database
from app.core.errors import StoreError
from app.core.logging import get_logger
from app.core.security import TokenCipher
from app.models.store import Platform, Store
from app.repositories.store import StoreRepository

logger = get_logger(__name__)


class StoreService:
    """Lazily upserts one Store per platform from configured credentials."""

    def __init__(self, db: Database, settings: Settings) -> None:
        self.db = db
        self.settings = settings
        self.cipher = TokenCipher(settings.encryption_key)

    def credentials(self, platform: Platform) -> tuple[str, str]:
        """(external ID, access credential) for a platform, or StoreError 500."""
        if platform is Platform.SHOPIFY:
            external_id = self.settings.shopify_shop_domain
            token = self.settings.shopify_access_token
            label = "Shopify"
        else:
            external_id = self.settings.swap_store_id
            token = self.settings.swap_api_key
            label = "SWAP"

        if not external_id or not token:
            raise StoreError(f"{label} credentials not configured", status_code=500)
        return external_id, token

    async def ensure_store(self, platform: Platform) -> Store:
        """Create the platform's store on first use; refresh its credential afterwards."""
        external_id, token = self.credentials(platform)
        async with self.db.session() as session:
            store, created = await StoreRepository(session).create_or_update(
                platform=platform.value,
                external_id=external_id,
                access_token_encrypted=self.cipher.encrypt(token),
            )
        if created:
            logger.info("Store created", platform=platform.value, external_id=external_id)
        return store

    async def resolve(self, platform: Platform, store_id: Optional[UUID] = None) -> Store:
        """An explicit store ID must exist on that platform; otherwise use the env store."""
        if store_id is None:
            return await self.ensure_store(platform)

        async with self.db.session() as session:
            store = await StoreRepository(session).get_by_id(store_id)
        if store is None or store.platform != platform.value:
            raise StoreError(f"Store not found: {store_id}", status_code=404)
        return store

    def access_token(self, store: Store) -> str:
        return self.cipher.decrypt(store.access_token_encrypted)
