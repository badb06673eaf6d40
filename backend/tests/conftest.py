"""
Main pytest configuration for the cache layer tests.

Provides an in-memory stand-in for the Redis server and fixtures wiring the
cache client, connection factory and cache service around it.
"""

import asyncio
import os
from typing import Any, Dict, List, Optional, Set, Tuple

import pytest

# Set test environment variables before importing application modules
os.environ["ENVIRONMENT"] = "test"
os.environ["CACHE_ENABLED"] = "true"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["LOG_JSON"] = "false"

from storefront_cache.infrastructure.redis.cache_client import (  # noqa: E402
    RedisCacheClient,
    RedisCacheConfig,
)
from storefront_cache.infrastructure.redis.connection_factory import (  # noqa: E402
    RedisConnectionConfig,
    RedisConnectionFactory,
)
from storefront_cache.services.cache.cache_service import CacheService  # noqa: E402


class FakeRedisServer:
    """Shared in-memory keyspace behind any number of fake connections."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.ttls: Dict[str, Optional[int]] = {}
        self.commands: List[Tuple[str, Any]] = []
        self.connections: List["FakeRedis"] = []
        # Commands listed here never complete
        self.hang: Set[str] = set()
        # Commands listed here raise the mapped exception
        self.fail: Dict[str, Exception] = {}

    def connect(self, config: Any = None) -> "FakeRedis":
        connection = FakeRedis(self)
        self.connections.append(connection)
        return connection

    def keys_deleted(self) -> List[str]:
        return [args for name, args in self.commands if name == "delete"]


class FakeRedis:
    """Minimal asyncio Redis connection over a FakeRedisServer."""

    def __init__(self, server: FakeRedisServer):
        self.server = server
        self.closed = False

    async def _command(self, name: str, args: Any) -> None:
        self.server.commands.append((name, args))
        if name in self.server.fail:
            raise self.server.fail[name]
        if name in self.server.hang:
            await asyncio.Event().wait()

    async def ping(self) -> bool:
        await self._command("ping", None)
        return True

    async def get(self, key: str) -> Optional[str]:
        await self._command("get", key)
        return self.server.data.get(key)

    async def set(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        await self._command("set", key)
        self.server.data[key] = value
        self.server.ttls[key] = ex
        return True

    async def delete(self, key: str) -> int:
        await self._command("delete", key)
        if key in self.server.data:
            del self.server.data[key]
            self.server.ttls.pop(key, None)
            return 1
        return 0

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def redis_server() -> FakeRedisServer:
    """In-memory Redis server."""
    return FakeRedisServer()


@pytest.fixture
def connection_factory(redis_server) -> RedisConnectionFactory:
    """Connection factory producing fake connections."""
    return RedisConnectionFactory(
        RedisConnectionConfig(connect_timeout=0.2),
        client_builder=redis_server.connect,
        instrument=False,
    )


@pytest.fixture
def cache_client(connection_factory) -> RedisCacheClient:
    """Enabled cache client with a short operation deadline."""
    return RedisCacheClient(
        RedisCacheConfig(enabled=True, operation_timeout=0.1, store_configured=True),
        connection_factory,
    )


@pytest.fixture
def disabled_cache_client(connection_factory) -> RedisCacheClient:
    """Cache client with the feature flag off."""
    return RedisCacheClient(RedisCacheConfig(enabled=False), connection_factory)


@pytest.fixture
def cache_service(cache_client) -> CacheService:
    """Domain cache service over the enabled fake-backed client."""
    return CacheService(cache_client)
