"""
Store model - one connected account per external platform.
"""
import enum
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, String, Text, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class Platform(str, enum.Enum):
    """External platforms a store can belong to."""

    SHOPIFY = "shopify"
    SWAP = "swap"


class Store(Base):
    """Connected platform account with encrypted credential storage."""

    __tablename__ = "stores"
    __table_args__ = (
        UniqueConstraint("platform", "external_id", name="uq_stores_platform_external_id"),
    )

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
    )
    platform: Mapped[str] = mapped_column(String(20), index=True, nullable=False)
    # Shop domain for Shopify, store identifier for SWAP
    external_id: Mapped[str] = mapped_column(String(255), nullable=False)
    store_name: Mapped[Optional[str]] = mapped_column(String(255))
    access_token_encrypted: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    # Sync tracking
    last_sync_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Store {self.platform}:{self.external_id}>"
