"""
Cache Infrastructure Exceptions

Domain-specific exceptions for cache operations.
Follows project standards for error handling without fallbacks.
"""

from typing import Optional, Any, Dict


class CacheException(Exception):
    """Base exception for cache-related errors.

    All cache operations should raise this or its subclasses.
    Never swallow backing store exceptions - always preserve context.
    """

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


class InvalidCacheArgumentException(CacheException):
    """Raised before any I/O when a caller passes an unusable argument."""

    def __init__(self, argument: str, message: Optional[str] = None):
        super().__init__(
            message=message or f"Invalid cache argument: {argument}",
            error_code="CACHE_INVALID_ARGUMENT",
            details={"argument": argument},
        )


class CacheSerializationException(CacheException):
    """Raised when a value cannot be encoded or cached text cannot be decoded."""

    def __init__(
        self,
        operation: str,
        target_type: Optional[str] = None,
        key: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {"operation": operation}
        if target_type:
            details["target_type"] = target_type
        if key:
            details["key"] = key
        if original_error:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__

        super().__init__(
            message=f"Cache {operation} failed"
            + (f" for type {target_type}" if target_type else ""),
            error_code="CACHE_SERIALIZATION_ERROR",
            details=details,
        )
        # Preserve exception context for debugging (exception chaining)
        if original_error:
            self.__cause__ = original_error


class CacheBackendException(CacheException):
    """Raised when the backing distributed cache fails."""

    def __init__(
        self,
        message: str = "Distributed cache operation failed",
        error_code: str = "CACHE_BACKEND_ERROR",
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        details = dict(details or {})
        if original_error:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__

        super().__init__(message=message, error_code=error_code, details=details)
        if original_error:
            self.__cause__ = original_error


class RedisConnectionException(CacheBackendException):
    """Raised when Redis connection fails or is lost."""

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

        super().__init__(
            message=message,
            error_code="REDIS_CONNECTION_ERROR",
            details=details,
            original_error=original_error,
        )


class RedisOperationTimeoutException(CacheBackendException):
    """Raised when Redis operation times out."""

    def __init__(
        self,
        operation: str,
        timeout_seconds: Optional[float] = None,
        key: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details: Dict[str, Any] = {"operation": operation}
        if timeout_seconds is not None:
            details["timeout_seconds"] = timeout_seconds
        if key:
            details["key"] = key

        suffix = f" after {timeout_seconds}s" if timeout_seconds is not None else ""
        super().__init__(
            message=f"Redis operation '{operation}' timed out{suffix}",
            error_code="REDIS_TIMEOUT_ERROR",
            details=details,
            original_error=original_error,
        )


class RedisConfigurationException(CacheBackendException):
    """Raised when Redis configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value is not None:
            details["config_value"] = str(config_value)

        super().__init__(
            message=message,
            error_code="REDIS_CONFIGURATION_ERROR",
            details=details,
            original_error=original_error,
        )
