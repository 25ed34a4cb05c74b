"""
Shared fixtures: in-memory database, fake platform APIs and app clients.
"""
import os

# Settings are read when app.main is imported
os.environ.setdefault("ENCRYPTION_KEY", "test-encryption-key-0123456789abcdef")
os.environ.setdefault("ENVIRONMENT", "development")

from collections.abc import AsyncGenerator  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.config import Settings, get_settings  # noqa: E402
from app.core.database import Database  # noqa: E402
from app.main import create_app  # noqa: E402
from app.models.store import Platform, Store  # noqa: E402
from app.routers.shopify import get_shopify_service  # noqa: E402
from app.routers.swap import get_swap_service  # noqa: E402
from app.services.shopify_client import ShopifyGraphQLClient  # noqa: E402
from app.services.shopify_service import ShopifyService  # noqa: E402
from app.services.stores import StoreService  # noqa: E402
from app.services.swap_client import SwapClient  # noqa: E402
from app.services.swap_service import SwapService  # noqa: E402
from factories import FakeShopifyApi, FakeSwapApi, SleepRecorder  # noqa: E402

TEST_ENCRYPTION_KEY = "test-encryption-key-0123456789abcdef"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        encryption_key=TEST_ENCRYPTION_KEY,
        shopify_shop_domain="test-shop.myshopify.com",
        shopify_access_token="shpat_test_token",
        swap_store_id="test-store",
        swap_api_key="swap-test-key",
        api_max_retries=2,
        api_retry_delay_seconds=0.5,
        sync_page_delay_seconds=1.0,
        sentry_dsn=None,
    )


@pytest.fixture
async def db() -> AsyncGenerator[Database, None]:
    """In-memory SQLite shared across sessions through a single connection."""
    database = Database(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await database.create_all()
    yield database
    await database.dispose()


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def shopify_api() -> FakeShopifyApi:
    return FakeShopifyApi()


@pytest.fixture
def swap_api() -> FakeSwapApi:
    return FakeSwapApi()


@pytest.fixture
def shopify_client(settings: Settings, shopify_api: FakeShopifyApi, sleeper: SleepRecorder) -> ShopifyGraphQLClient:
    return ShopifyGraphQLClient.from_settings(
        settings,
        settings.shopify_shop_domain,
        settings.shopify_access_token,
        transport=shopify_api.transport,
        sleep=sleeper,
    )


@pytest.fixture
def swap_client(settings: Settings, swap_api: FakeSwapApi, sleeper: SleepRecorder) -> SwapClient:
    return SwapClient.from_settings(
        settings,
        settings.swap_api_key,
        transport=swap_api.transport,
        sleep=sleeper,
    )


@pytest.fixture
async def shopify_store(db: Database, settings: Settings) -> Store:
    return await StoreService(db, settings).ensure_store(Platform.SHOPIFY)


@pytest.fixture
async def swap_store(db: Database, settings: Settings) -> Store:
    return await StoreService(db, settings).ensure_store(Platform.SWAP)


@pytest.fixture
def shopify_service(
    db: Database,
    settings: Settings,
    shopify_api: FakeShopifyApi,
    sleeper: SleepRecorder,
) -> ShopifyService:
    return ShopifyService(db, settings, transport=shopify_api.transport, sleep=sleeper)


@pytest.fixture
def swap_service(
    db: Database,
    settings: Settings,
    swap_api: FakeSwapApi,
    sleeper: SleepRecorder,
) -> SwapService:
    return SwapService(db, settings, transport=swap_api.transport, sleep=sleeper)


@pytest.fixture
def app(
    db: Database,
    settings: Settings,
    shopify_service: ShopifyService,
    swap_service: SwapService,
) -> FastAPI:
    application = create_app(settings=settings, db=db)
    application.dependency_overrides[get_settings] = lambda: settings
    application.dependency_overrides[get_shopify_service] = lambda: shopify_service
    application.dependency_overrides[get_swap_service] = lambda: swap_service
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Synchronous client for endpoints that do not touch the database."""
    return TestClient(app)


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Async client sharing the test event loop with the database."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
