"""
Database connection management with SQLAlchemy async.

The process entry point constructs one `Database` and hands it down to
services and routes; nothing here holds module-level engine state.
"""
import re
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.core.config import Settings
from app.core.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all models."""
    pass


def to_async_url(database_url: str) -> str:
    """Convert postgresql:// to postgresql+asyncpg://."""
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return database_url


class Database:
    """
    Persistence handle owning the async engine and session factory.

    Each `session()` block is one unit of work: committed on success,
    rolled back on error.
    """

    def __init__(self, url: str, **engine_kwargs: Any) -> None:
        self.url = to_async_url(url)
        self.engine: AsyncEngine = create_async_engine(self.url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Build the production handle with pooling configured from settings."""
        db = cls(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            echo=settings.database_echo,
            pool_pre_ping=True,
        )
        sanitized = re.sub(r":([^:@]+)@", ":***@", db.url)
        logger.info("Database engine created", url=sanitized)
        return db

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Context manager for a committed-on-exit session."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        """Create tables for every registered model."""
        # Registers all mappers on Base.metadata
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database initialized")

    async def dispose(self) -> None:
        """Close database connections."""
        await self.engine.dispose()
        logger.info("Database connections closed")


def get_database(request: Request) -> Database:
    """Dependency returning the handle created by the application lifespan."""
    return request.app.state.db


async def get_db_session(
    db: Annotated[Database, Depends(get_database)],
) -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a database session with automatic cleanup."""
    async with db.session() as session:
        yield session


# Type aliases for dependency injection
DbHandle = Annotated[Database, Depends(get_database)]
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
