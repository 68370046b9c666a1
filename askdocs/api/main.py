"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers and configures uvicorn server.

Dependencies: fastapi, askdocs.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import asyncio
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from askdocs import __version__
from askdocs.api.deps.dependencies import ServiceCache, get_service_cache
from askdocs.configs.settings import Settings, get_settings
from askdocs.observability import configure_logging
from askdocs.observability.log_utils import log_exception_with_context
from askdocs.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware
from .routers import (
    chat_router,
    collections_router,
    health_router,
    ingest_router,
    sessions_router,
)

logger = logging.getLogger(__name__)


async def sweep_periodically(cache: ServiceCache, interval_seconds: float) -> None:
    """
    Run the stale collection sweep forever at a fixed interval.

    A failed sweep is logged and retried at the next tick.
    """
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            deleted = await cache.collection_manager.sweep_stale()
            logger.info(f"{__name__}:sweep_periodically - Swept {len(deleted)} collections")
        except Exception as e:
            log_exception_with_context(logger, f"{__name__}:sweep_periodically - Sweep failed", e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    cache = get_service_cache()
    configure_logging(cache.settings.log_level)

    # Startup
    logger.info("Pre-warming service cache...")
    _ = cache.collection_manager
    _ = cache.pipeline
    _ = cache.generator
    logger.info("Service cache pre-warmed")

    sweep_task = None
    interval_minutes = cache.settings.vector_store.sweep_interval_minutes
    if interval_minutes > 0:
        sweep_task = asyncio.create_task(sweep_periodically(cache, interval_minutes * 60))
        logger.info(f"Stale collection sweep scheduled every {interval_minutes:g} minutes")

    yield

    # Shutdown
    if sweep_task is not None:
        sweep_task.cancel()
        try:
            await sweep_task
        except asyncio.CancelledError:
            pass
    await cache.aclose()
    logger.info("Service cache cleared")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Interactive docs are served outside production only.

    Args:
        settings: Application settings (defaults to get_settings())

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    settings = settings or get_settings()
    docs_enabled = not settings.is_production

    app = FastAPI(
        title="AskDocs RAG API",
        description="Session-scoped document Q&A with grounded, cited answers",
        version=__version__,
        debug=settings.debug,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(ingest_router, prefix="/api/v1")
    app.include_router(chat_router, prefix="/api/v1")
    app.include_router(sessions_router, prefix="/api/v1")
    app.include_router(collections_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "askdocs.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
