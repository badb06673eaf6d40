"""
Redis Connection Factory

Lazy, memoized connection management for the cache client.
A single in-flight connection attempt is shared by concurrent callers, and
any detected failure discards the memoized handle so the next call reconnects.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Set
from urllib.parse import urlparse

import structlog
from redis.asyncio import Redis
from opentelemetry import trace
from opentelemetry.instrumentation.redis import RedisInstrumentor

from ...constants import DEFAULT_CONNECT_TIMEOUT
from ...core.config import Settings
from .exceptions import (
    RedisConfigurationException,
    RedisConnectionException,
    RedisOperationTimeoutException,
)

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)


@dataclass
class RedisConnectionConfig:
    """Connection parameters for the shared cache store."""

    url: Optional[str] = None
    host: str = "localhost"
    port: int = 6379
    username: Optional[str] = None
    password: Optional[str] = None
    db: int = 0
    tls: bool = False
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT

    def __post_init__(self) -> None:
        if self.connect_timeout <= 0:
            raise RedisConfigurationException(
                "Redis connect timeout must be positive",
                config_key="connect_timeout",
                config_value=self.connect_timeout,
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisConnectionConfig":
        return cls(
            url=settings.REDIS_URL,
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            username=settings.REDIS_USERNAME,
            password=settings.REDIS_PASSWORD,
            db=settings.REDIS_DB,
            tls=settings.REDIS_TLS,
            connect_timeout=settings.CACHE_CONNECT_TIMEOUT,
        )

    @property
    def display_host(self) -> str:
        """Host for logs, never including credentials."""
        if self.url:
            parsed = urlparse(self.url)
            return parsed.hostname or parsed.path or "unknown"
        return self.host


def create_redis_client(config: RedisConnectionConfig) -> Redis:
    """Build an unconnected asyncio Redis client from connection parameters."""
    if config.url:
        return Redis.from_url(
            config.url,
            decode_responses=True,
            socket_connect_timeout=config.connect_timeout,
        )

    return Redis(
        host=config.host,
        port=config.port,
        username=config.username,
        password=config.password,
        db=config.db,
        ssl=config.tls,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=config.connect_timeout,
    )


RedisClientBuilder = Callable[[RedisConnectionConfig], Any]


class RedisConnectionFactory:
    """
    Factory owning the single shared Redis handle of a cache client.

    The handle is created on first use and memoized until a failure is
    reported through ``reset``. Concurrent first callers await the same
    connection task instead of racing separate connects.
    """

    def __init__(
        self,
        config: RedisConnectionConfig,
        client_builder: Optional[RedisClientBuilder] = None,
        instrument: bool = True,
    ):
        self.config = config
        self._client_builder = client_builder or create_redis_client
        self._client: Optional[Redis] = None
        self._connect_task: Optional[asyncio.Task] = None
        self._pending_disposals: Set[asyncio.Task] = set()
        self.connect_attempts = 0
        self.resets = 0

        if instrument:
            self._instrument()

    @staticmethod
    def _instrument() -> None:
        try:
            instrumentor = RedisInstrumentor()
            if not instrumentor.is_instrumented_by_opentelemetry:
                instrumentor.instrument()
                logger.info("redis_instrumentation_enabled")
        except Exception as e:
            logger.warning("redis_instrumentation_failed", error=str(e))

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def get_client(self) -> Redis:
        """
        Return the memoized client, connecting first if needed.

        Raises:
            RedisOperationTimeoutException: If the connect exceeds its deadline
            RedisConnectionException: If the connect fails
        """
        if self._client is not None:
            return self._client

        if self._connect_task is None:
            self._connect_task = asyncio.create_task(self._connect())
        task = self._connect_task

        try:
            # Shielded so one cancelled caller does not abort the shared attempt
            client = await asyncio.shield(task)
        except asyncio.TimeoutError as e:
            self._forget_task(task)
            raise RedisOperationTimeoutException(
                operation="connect", timeout_seconds=self.config.connect_timeout
            ) from e
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            # The shared attempt was aborted (close), not this caller
            self._forget_task(task)
            raise RedisConnectionException(
                message="Redis connection attempt was aborted",
                host=self.config.display_host,
                port=None if self.config.url else self.config.port,
            )
        except Exception as e:
            self._forget_task(task)
            raise RedisConnectionException(
                message=f"Redis connection failed: {e}",
                host=self.config.display_host,
                port=None if self.config.url else self.config.port,
                original_error=e,
            ) from e

        if self._connect_task is task:
            self._client = client
            self._connect_task = None
        return client

    def _forget_task(self, task: asyncio.Task) -> None:
        if self._connect_task is task:
            self._connect_task = None

    async def _connect(self) -> Redis:
        with tracer.start_as_current_span("redis.connect") as span:
            self.connect_attempts += 1
            span.set_attribute("redis.connect_attempt", self.connect_attempts)

            client = self._client_builder(self.config)
            try:
                await asyncio.wait_for(
                    client.ping(), timeout=self.config.connect_timeout
                )
            except BaseException:
                self._schedule_dispose(client)
                raise

            logger.info(
                "redis_connected",
                host=self.config.display_host,
                db=self.config.db,
                attempt=self.connect_attempts,
            )
            return client

    def reset(self, client: Optional[Redis] = None) -> None:
        """
        Discard the memoized handle so the next call reconnects.

        When ``client`` is given, the handle is only discarded if it is still
        the current one; a late failure on an old handle leaves a newer
        healthy handle in place.
        """
        current = self._client
        if current is None:
            return
        if client is not None and client is not current:
            return

        self._client = None
        self.resets += 1
        logger.warning("redis_connection_reset", resets=self.resets)
        self._schedule_dispose(current)

    def _schedule_dispose(self, client: Any) -> None:
        try:
            task = asyncio.get_running_loop().create_task(self._dispose(client))
        except RuntimeError:
            return
        self._pending_disposals.add(task)
        task.add_done_callback(self._pending_disposals.discard)

    async def _dispose(self, client: Any) -> None:
        try:
            await asyncio.wait_for(
                client.aclose(), timeout=self.config.connect_timeout
            )
        except Exception as e:
            logger.debug("redis_dispose_failed", error=str(e))

    async def close(self) -> None:
        """Close the memoized connection and any pending connect attempt."""
        if self._connect_task is not None:
            self._connect_task.cancel()
            try:
                await self._connect_task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.debug("redis_connect_aborted", error=str(e))
            self._connect_task = None

        if self._client is not None:
            client, self._client = self._client, None
            await self._dispose(client)

        if self._pending_disposals:
            await asyncio.gather(*self._pending_disposals, return_exceptions=True)

        logger.info("redis_connection_factory_closed")

    def get_metrics(self) -> Dict[str, Any]:
        """Get connection factory metrics."""
        return {
            "connected": self.is_connected,
            "connecting": self._connect_task is not None,
            "connect_attempts": self.connect_attempts,
            "resets": self.resets,
            "host": self.config.display_host,
        }
