"""
Storefront Cache - Composition Root

Builds exactly one cache client and one cache service per process from the
application settings and exposes them on ``app.state`` for route handlers
and data-access code.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI

from .api.endpoints.cache import router as cache_router
from .constants import APP_NAME, APP_VERSION
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .infrastructure.redis.cache_client import RedisCacheClient
from .services.cache.cache_service import CacheService

logger = structlog.get_logger()


def build_cache_service(settings: Settings) -> CacheService:
    """Wire a cache client and the domain cache service from settings."""
    client = RedisCacheClient.from_settings(settings)
    return CacheService(client)


def create_app(
    settings: Optional[Settings] = None,
    cache_service: Optional[CacheService] = None,
) -> FastAPI:
    """Create the FastAPI application with the cache layer attached."""
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        service = cache_service or build_cache_service(settings)
        app.state.cache_service = service
        app.state.cache_client = service.store
        logger.info(
            "cache_layer_started",
            enabled=settings.cache_enabled,
            environment=settings.ENVIRONMENT,
        )

        try:
            yield
        finally:
            close = getattr(service.store, "close", None)
            if close is not None:
                await close()
            logger.info("cache_layer_stopped")

    app = FastAPI(title=APP_NAME, version=APP_VERSION, lifespan=lifespan)
    app.include_router(cache_router)
    return app
