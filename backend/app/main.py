"""
Returns Reconciliation API - Main Application Entry Point.

Syncs Shopify orders and catalog plus SWAP returns into one database and
matches returns to the orders they came from.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import Settings, get_settings
from app.core.database import Database
from app.core.logging import configure_logging, get_logger
from app.middleware import ErrorHandlerMiddleware, RequestIdMiddleware, register_exception_handlers
from app.routers import (
    analytics_router,
    health_router,
    matching_router,
    shopify_router,
    swap_router,
)

# Configure logging before anything else
configure_logging(get_settings())
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Builds the database handle unless one was attached before startup,
    and only disposes a handle it created.
    """
    settings: Settings = app.state.settings
    logger.info(
        "Starting application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    owns_db = getattr(app.state, "db", None) is None
    if owns_db:
        app.state.db = Database.from_settings(settings)
    await app.state.db.create_all()

    if settings.sentry_dsn:
        import sentry_sdk

        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,
        )
        logger.info("Sentry initialized")

    yield

    logger.info("Shutting down application")
    if owns_db:
        await app.state.db.dispose()
        app.state.db = None


def create_app(settings: Optional[Settings] = None, db: Optional[Database] = None) -> FastAPI:
    """
    Application factory function.
    Creates and configures the FastAPI application.
    """
    settings = settings or get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Shopify and SWAP returns sync and reconciliation API",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db = db

    # Add middleware (order matters - last added = outermost)
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
    )

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(shopify_router, prefix="/api")
    app.include_router(swap_router, prefix="/api")
    app.include_router(matching_router, prefix="/api")
    app.include_router(analytics_router, prefix="/api")

    logger.info(
        "Application created",
        routes=len(app.routes),
        cors_origins=len(settings.allowed_origins),
    )

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
