"""
Redis Cache Client

Best-effort, timeout-bounded access to the shared key-value cache.

Every public operation degrades to "as if no cache existed": reads return
``None``, writes and deletes return ``False``. Nothing raises to the caller,
so the application stays correct (only slower) with the cache offline.
"""

import asyncio
import json
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from redis.asyncio import Redis
from redis.exceptions import (
    ConnectionError as RedisConnectionError,
    TimeoutError as RedisTimeoutError,
)

from ...constants import (
    DEFAULT_OPERATION_TIMEOUT,
    DEFAULT_TTL_SECONDS,
    KEY_PREFIX,
)
from ...core.config import Settings
from ...domain.cache.repository_interfaces import CacheStore
from ...domain.cache.value_objects import TTL
from ...monitoring.cache_metrics import CacheMetrics
from .connection_factory import RedisConnectionConfig, RedisConnectionFactory
from .exceptions import (
    RedisConfigurationException,
    RedisConnectionException,
    RedisException,
    RedisOperationTimeoutException,
    RedisSerializationException,
)

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

RedisCommand = Callable[[Redis, str], Awaitable[Any]]


@dataclass
class RedisCacheConfig:
    """Behaviour settings for the cache client."""

    enabled: bool = False
    key_prefix: str = KEY_PREFIX
    operation_timeout: float = DEFAULT_OPERATION_TIMEOUT
    default_ttl: int = DEFAULT_TTL_SECONDS
    store_configured: bool = False

    def __post_init__(self) -> None:
        if self.operation_timeout <= 0:
            raise RedisConfigurationException(
                "Cache operation timeout must be positive",
                config_key="operation_timeout",
                config_value=self.operation_timeout,
            )
        if self.default_ttl <= 0:
            raise RedisConfigurationException(
                "Default cache TTL must be positive",
                config_key="default_ttl",
                config_value=self.default_ttl,
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisCacheConfig":
        return cls(
            enabled=settings.cache_enabled,
            operation_timeout=settings.CACHE_OPERATION_TIMEOUT,
            default_ttl=settings.CACHE_DEFAULT_TTL,
            store_configured=settings.redis_configured,
        )


def is_empty_value(value: Any) -> bool:
    """Values that are never written: None, False, 0 and the empty string.

    Empty lists and dicts are real results (an empty inventory page) and
    are cached like any other value.
    """
    if value is None or value is False:
        return True
    if isinstance(value, (str, int, float)) and not value:
        return True
    return False


class RedisCacheClient(CacheStore):
    """
    Fail-open cache client over a lazily connected Redis handle.

    Owns one ``RedisConnectionFactory``. A timeout or connection error on
    any operation discards the shared handle, so the next call reconnects
    instead of reusing a known-bad connection. No retries happen inside a
    call.
    """

    def __init__(
        self,
        config: RedisCacheConfig,
        connection_factory: RedisConnectionFactory,
        metrics: Optional[CacheMetrics] = None,
    ):
        self.config = config
        self.connection_factory = connection_factory
        self.metrics = metrics or CacheMetrics()

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisCacheClient":
        """Build a client and its connection factory from application settings."""
        return cls(
            RedisCacheConfig.from_settings(settings),
            RedisConnectionFactory(RedisConnectionConfig.from_settings(settings)),
        )

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def _make_key(self, key: str) -> str:
        return f"{self.config.key_prefix}{key}"

    async def _run(self, operation: str, key: str, command: RedisCommand) -> Any:
        """
        Execute one command against the shared handle under the deadline.

        The command and the deadline race; whichever finishes first wins and
        the command is cancelled if it loses.

        Raises:
            RedisOperationTimeoutException: If the command loses the race
            RedisConnectionException: If the connection is unusable
        """
        client = await self.connection_factory.get_client()

        try:
            return await asyncio.wait_for(
                command(client, self._make_key(key)),
                timeout=self.config.operation_timeout,
            )
        except asyncio.TimeoutError as e:
            self.connection_factory.reset(client)
            raise RedisOperationTimeoutException(
                operation=operation,
                timeout_seconds=self.config.operation_timeout,
                key=key,
            ) from e
        except (RedisConnectionError, RedisTimeoutError, OSError) as e:
            self.connection_factory.reset(client)
            raise RedisConnectionException(
                message=f"Redis {operation} failed: {e}", original_error=e
            ) from e

    def _record_failure(
        self, operation: str, key: str, error: Exception, start_time: float, span
    ) -> None:
        duration = time.perf_counter() - start_time
        outcome = (
            "timeout" if isinstance(error, RedisOperationTimeoutException) else "error"
        )
        self.metrics.record(operation, outcome, duration)
        span.set_status(Status(StatusCode.ERROR, str(error)))

        if isinstance(error, RedisException):
            logger.warning(
                "cache_operation_failed",
                operation=operation,
                key=key,
                error_code=error.error_code,
                error=error.message,
            )
        else:
            logger.error(
                "cache_operation_failed",
                operation=operation,
                key=key,
                error=str(error),
                exc_info=True,
            )

    def _resolve_ttl(self, ttl_seconds: Any) -> Optional[int]:
        """Expiry in seconds, or None when the value is unusable."""
        if ttl_seconds is None:
            return self.config.default_ttl
        if isinstance(ttl_seconds, TTL):
            return ttl_seconds.seconds
        try:
            ttl = int(ttl_seconds)
        except (TypeError, ValueError):
            return None
        return ttl if ttl > 0 else None

    @staticmethod
    def _encode(key: str, value: Any) -> str:
        try:
            return json.dumps(value, default=str)
        except (TypeError, ValueError) as e:
            raise RedisSerializationException(key, "encode", e) from e

    @staticmethod
    def _decode(key: str, raw: Any) -> Any:
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            raise RedisSerializationException(key, "decode", e) from e

    async def get_cached(self, key: str) -> Optional[Any]:
        """
        Read and decode a cached value.

        Returns:
            The cached value, or None on miss, disabled cache, unreachable
            store, undecodable payload or timeout
        """
        if not self.enabled:
            self.metrics.record("get", "disabled")
            return None

        with tracer.start_as_current_span("cache.get") as span:
            span.set_attribute("cache.key", key)
            start_time = time.perf_counter()

            try:
                raw = await self._run("get", key, lambda client, k: client.get(k))
                if raw is None:
                    span.set_attribute("cache.hit", False)
                    self.metrics.record(
                        "get", "miss", time.perf_counter() - start_time
                    )
                    return None

                value = self._decode(key, raw)
                span.set_attribute("cache.hit", True)
                self.metrics.record("get", "hit", time.perf_counter() - start_time)
                return value

            except Exception as e:
                self._record_failure("get", key, e, start_time, span)
                return None

    async def set_cache(
        self, key: str, value: Any, ttl_seconds: Optional[Union[int, TTL]] = None
    ) -> bool:
        """
        Encode and store a value with a fixed TTL.

        Args:
            key: Unprefixed cache key
            value: JSON-serializable value; empty values are not written
            ttl_seconds: Expiry in seconds or a TTL (client default when
                omitted); unusable values reject the write

        Returns:
            True if the value was written
        """
        if not self.enabled:
            self.metrics.record("set", "disabled")
            return False

        if is_empty_value(value):
            self.metrics.record("set", "rejected")
            logger.debug("cache_set_rejected_empty", key=key)
            return False

        ttl = self._resolve_ttl(ttl_seconds)
        if ttl is None:
            self.metrics.record("set", "rejected")
            logger.warning("cache_set_rejected_ttl", key=key, ttl=repr(ttl_seconds))
            return False

        with tracer.start_as_current_span("cache.set") as span:
            span.set_attribute("cache.key", key)
            span.set_attribute("cache.ttl", ttl)
            start_time = time.perf_counter()

            try:
                payload = self._encode(key, value)
                result = await self._run(
                    "set", key, lambda client, k: client.set(k, payload, ex=ttl)
                )
                self.metrics.record("set", "written", time.perf_counter() - start_time)
                return bool(result)

            except Exception as e:
                self._record_failure("set", key, e, start_time, span)
                return False

    async def delete_cache(self, key: str) -> bool:
        """
        Delete a cached value.

        Returns:
            True if at least one record was removed; False if nothing was
            there or the cache is disabled or unavailable
        """
        if not self.enabled:
            self.metrics.record("delete", "disabled")
            return False

        with tracer.start_as_current_span("cache.delete") as span:
            span.set_attribute("cache.key", key)
            start_time = time.perf_counter()

            try:
                removed = await self._run(
                    "delete", key, lambda client, k: client.delete(k)
                )
                removed = int(removed or 0)
                self.metrics.record(
                    "delete",
                    "deleted" if removed else "not_found",
                    time.perf_counter() - start_time,
                )
                span.set_attribute("cache.removed", removed)
                return removed > 0

            except Exception as e:
                self._record_failure("delete", key, e, start_time, span)
                return False

    async def health_check(self) -> Dict[str, Any]:
        """Ping the store; never raises."""
        if not self.enabled:
            return {"status": "disabled", "timestamp": time.time()}

        start_time = time.perf_counter()
        try:
            await self._run("ping", "", lambda client, _k: client.ping())
            return {
                "status": "healthy",
                "timestamp": time.time(),
                "response_time_ms": round((time.perf_counter() - start_time) * 1000, 2),
            }
        except Exception as e:
            logger.warning("cache_health_check_failed", error=str(e))
            return {"status": "unhealthy", "timestamp": time.time(), "error": str(e)}

    def get_stats(self) -> Dict[str, Any]:
        """Get cache client configuration and operation counters."""
        return {
            "enabled": self.enabled,
            "redis_url": "configured"
            if self.config.store_configured
            else "not configured",
            "key_prefix": self.config.key_prefix,
            "operation_timeout": self.config.operation_timeout,
            "connection": self.connection_factory.get_metrics(),
            "operations": self.metrics.snapshot(),
        }

    async def close(self) -> None:
        """Release the shared connection."""
        await self.connection_factory.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
