"""
Cache Monitoring API Endpoints

Read-only endpoints reporting the cache layer's health, configuration and
operation counters. The cache itself stays optional: an unhealthy cache is
reported, never fatal to the application.
"""

from typing import Any, Dict

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from ...infrastructure.redis.cache_client import RedisCacheClient
from ...infrastructure.redis.exceptions import (
    RedisConnectionException,
    RedisHTTPException,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/cache", tags=["cache"])


class CacheStatsResponse(BaseModel):
    """Cache statistics model."""

    enabled: bool
    redis_url: str = Field(..., description="'configured' or 'not configured'")
    key_prefix: str
    operation_timeout: float
    connection: Dict[str, Any]
    operations: Dict[str, Any]


def get_cache_client(request: Request) -> RedisCacheClient:
    """Resolve the process-wide cache client from the composition root."""
    return request.app.state.cache_client


@router.get("/health")
async def cache_health(
    client: RedisCacheClient = Depends(get_cache_client),
) -> Dict[str, Any]:
    """
    Cache health check.

    Returns 200 when healthy or disabled and 503 when the store is enabled
    but unreachable.
    """
    health = await client.health_check()
    if health["status"] == "unhealthy":
        logger.warning("cache_health_unhealthy", error=health.get("error"))
        raise RedisHTTPException(
            RedisConnectionException(
                message=f"Cache store unreachable: {health.get('error')}"
            )
        )
    return health


@router.get("/stats", response_model=CacheStatsResponse)
async def cache_stats(
    client: RedisCacheClient = Depends(get_cache_client),
) -> CacheStatsResponse:
    """Cache configuration, connection state and operation counters."""
    return CacheStatsResponse(**client.get_stats())


@router.get("/metrics", response_class=PlainTextResponse)
async def cache_metrics(
    client: RedisCacheClient = Depends(get_cache_client),
) -> str:
    """Prometheus exposition of the cache operation metrics."""
    return client.metrics.export()
