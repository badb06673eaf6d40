"""
Redis Infrastructure Module

Fail-open Redis access for the cache-aside layer.

This module provides:
- RedisCacheClient: get/set/delete bounded by a deadline, no-op when disabled
- RedisConnectionFactory: lazy, single-flight connection with reset on failure
- Exception types used to classify cache failures
"""

from .cache_client import RedisCacheClient, RedisCacheConfig, is_empty_value
from .connection_factory import (
    RedisConnectionConfig,
    RedisConnectionFactory,
    create_redis_client,
)
from .exceptions import (
    RedisException,
    RedisConnectionException,
    RedisOperationTimeoutException,
    RedisSerializationException,
    RedisConfigurationException,
    RedisHTTPException,
)

__all__ = [
    # Client
    "RedisCacheClient",
    "RedisCacheConfig",
    "is_empty_value",
    # Connection management
    "RedisConnectionConfig",
    "RedisConnectionFactory",
    "create_redis_client",
    # Exceptions
    "RedisException",
    "RedisConnectionException",
    "RedisOperationTimeoutException",
    "RedisSerializationException",
    "RedisConfigurationException",
    "RedisHTTPException",
]
