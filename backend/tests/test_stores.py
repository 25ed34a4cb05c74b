"""
Tests for store resolution and credential encryption.
"""
from uuid import uuid4

import pytest

from app.core.errors import StoreError
from app.core.security import TokenCipher
from app.models.store import Platform
from app.services.stores import StoreService


class TestTokenCipher:
    def test_round_trip(self):
        cipher = TokenCipher("x" * 32)
        encrypted = cipher.encrypt("shpat_secret")

        assert encrypted != "shpat_secret"
        assert cipher.decrypt(encrypted) == "shpat_secret"

    def test_wrong_key_is_rejected(self):
        encrypted = TokenCipher("a" * 32).encrypt("token")

        with pytest.raises(ValueError):
            TokenCipher("b" * 32).decrypt(encrypted)


class TestStoreService:
    async def test_ensure_store_is_stable(self, db, settings):
        service = StoreService(db, settings)

        first = await service.ensure_store(Platform.SHOPIFY)
        second = await service.ensure_store(Platform.SHOPIFY)

        assert first.id == second.id
        assert first.external_id == "test-shop.myshopify.com"
        assert service.access_token(second) == "shpat_test_token"

    async def test_platforms_get_separate_stores(self, db, settings):
        service = StoreService(db, settings)

        shopify = await service.ensure_store(Platform.SHOPIFY)
        swap = await service.ensure_store(Platform.SWAP)

        assert shopify.id != swap.id
        assert swap.platform == "swap"
        assert service.access_token(swap) == "swap-test-key"

    async def test_missing_credentials(self, db, settings):
        bare = settings.model_copy(update={"swap_api_key": None})

        with pytest.raises(StoreError) as exc_info:
            await StoreService(db, bare).ensure_store(Platform.SWAP)

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "SWAP credentials not configured"

    async def test_resolve_rejects_other_platform(self, db, settings, swap_store):
        service = StoreService(db, settings)

        with pytest.raises(StoreError) as exc_info:
            await service.resolve(Platform.SHOPIFY, swap_store.id)
        assert exc_info.value.status_code == 404

        with pytest.raises(StoreError):
            await service.resolve(Platform.SWAP, uuid4())

        resolved = await service.resolve(Platform.SWAP, swap_store.id)
        assert resolved.id == swap_store.id
