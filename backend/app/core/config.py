"""
Centralized configuration management with Pydantic Settings.
All environment variables are validated and typed.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Returns Reconciliation API"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = Field(default="development", pattern="^(development|staging|production)$")

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Database
    database_url: str = "postgresql://localhost:5432/returns_reconciliation"
    database_pool_size: int = 20
    database_max_overflow: int = 10
    database_echo: bool = False

    # Redis (arq worker for scheduled syncs)
    redis_url: str = "redis://localhost:6379"
    scheduled_sync_enabled: bool = True

    # Security
    encryption_key: str = Field(min_length=32)

    # CORS - stored as comma-separated string to avoid JSON parsing issues
    allowed_origins_str: str = Field(default="http://localhost:3000", alias="ALLOWED_ORIGINS")

    @property
    def allowed_origins(self) -> List[str]:
        """Parse allowed origins from comma-separated string."""
        return [origin.strip() for origin in self.allowed_origins_str.split(",") if origin.strip()]

    # Shopify store credentials (required before any Shopify operation)
    shopify_shop_domain: Optional[str] = None
    shopify_access_token: Optional[str] = None
    shopify_api_version: str = "2024-10"

    # SWAP returns platform credentials
    swap_store_id: Optional[str] = None
    swap_api_key: Optional[str] = None
    swap_api_base_url: str = "https://api-mfdugldntq-nw.a.run.app/v1/external"

    # Outbound API clients
    api_timeout_seconds: float = 30.0
    api_max_retries: int = Field(default=3, ge=0)
    api_retry_delay_seconds: float = 1.0

    # Sync orchestration
    sync_page_size: int = Field(default=50, ge=1, le=50)
    sync_page_delay_seconds: float = 1.0
    sync_lookback_days: int = 30
    swap_default_from_date: str = "2024-01-01T00:00:00Z"

    # Matching
    match_batch_size: int = Field(default=100, ge=1)

    # Observability
    sentry_dsn: Optional[str] = None
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
