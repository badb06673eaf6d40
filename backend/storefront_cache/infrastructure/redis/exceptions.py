"""
Redis Infrastructure Exceptions

Exceptions used to classify cache failures inside the infrastructure layer.
The public cache client catches all of them and degrades to a cache miss.
"""

from typing import Optional, Any, Dict

from fastapi import HTTPException


class RedisException(Exception):
    """Base exception for Redis-related errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class RedisConnectionException(RedisException):
    """Raised when a Redis connection cannot be established or is lost."""

    def __init__(
        self,
        message: str = "Redis connection failed",
        host: Optional[str] = None,
        port: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if host:
            details["host"] = host
        if port:
            details["port"] = port
        if original_error:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__

        super().__init__(
            message=message, error_code="REDIS_CONNECTION_ERROR", details=details
        )
        if original_error:
            self.__cause__ = original_error


class RedisOperationTimeoutException(RedisException):
    """Raised when a Redis operation exceeds its deadline."""

    def __init__(
        self, operation: str, timeout_seconds: float, key: Optional[str] = None
    ):
        details = {"operation": operation, "timeout_seconds": timeout_seconds}
        if key:
            details["key"] = key

        super().__init__(
            message=f"Redis operation '{operation}' timed out after {timeout_seconds}s",
            error_code="REDIS_TIMEOUT_ERROR",
            details=details,
        )


class RedisSerializationException(RedisException):
    """Raised when a cached value cannot be encoded or decoded as JSON."""

    def __init__(
        self,
        key: str,
        direction: str,
        original_error: Optional[Exception] = None,
    ):
        details = {"key": key, "direction": direction}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message=f"Failed to {direction} cached value for key: {key}",
            error_code="REDIS_SERIALIZATION_ERROR",
            details=details,
        )
        if original_error:
            self.__cause__ = original_error


class RedisConfigurationException(RedisException):
    """Raised when Redis configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
    ):
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value is not None:
            details["config_value"] = str(config_value)

        super().__init__(
            message=message, error_code="REDIS_CONFIGURATION_ERROR", details=details
        )


# HTTP Exceptions for API layer
class RedisHTTPException(HTTPException):
    """HTTP exception wrapper for Redis errors."""

    def __init__(self, redis_exception: RedisException, status_code: int = 503):
        self.redis_exception = redis_exception
        super().__init__(
            status_code=status_code,
            detail={
                "error": redis_exception.error_code,
                "message": redis_exception.message,
                "details": redis_exception.details,
            },
        )
