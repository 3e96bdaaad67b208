"""
Base Exception Class

This module contains the base exception class that every prometheus-tasks
error inherits from, plus ConfigurationError. Remote-call and decoding
failures live in prometheus.py.
"""

from typing import Any


class PrometheusTaskError(Exception):
    """
    Base exception for all prometheus-tasks errors.

    All custom exceptions inherit from this class to enable:
    - Consistent error handling in task runners and schedulers
    - Invocation ID correlation
    - Structured error logging

    Attributes:
        message: Error message
        invocation_id: ID of the query/push/tick invocation (if available)
        details: Additional error details (dict)

    Example:
        raise RemoteCallFailure(
            "Prometheus call failed: 503 Service Unavailable",
            invocation_id="query-7f3a",
            details={"status_code": 503, "url": "http://localhost:9090/api/v1/query"}
        )
    """

    def __init__(
        self,
        message: str,
        invocation_id: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.invocation_id = invocation_id
        self.details = (details or {}).copy()
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for structured logging.

        Returns:
            Dict with error_type, message, invocation_id, and details
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "invocation_id": self.invocation_id,
            "details": self.details,
        }

    def with_context(self, **context) -> "PrometheusTaskError":
        """
        Add additional context to the error details.

        Returns:
            Self (for method chaining)
        """
        self.details.update(context)
        return self

    def __repr__(self) -> str:
        details_str = f", details={self.details}" if self.details else ""
        invocation_str = f", invocation_id='{self.invocation_id}'" if self.invocation_id else ""
        return f"{self.__class__.__name__}(message='{self.message}'{invocation_str}{details_str})"

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        message: str | None = None,
        invocation_id: str | None = None,
        **details,
    ) -> "PrometheusTaskError":
        """
        Create an error of this class from another exception.

        Useful for wrapping httpx or orjson exceptions with additional context.

        Example:
            >>> try:
            ...     await client.send(request)
            ... except httpx.ConnectError as e:
            ...     raise TransportFailure.from_exception(e, url=str(request.url)) from e
        """
        error_message = message or str(exc)
        error_details = {
            "original_error": exc.__class__.__name__,
            "original_message": str(exc),
            **details,
        }
        return cls(error_message, invocation_id=invocation_id, details=error_details)


class ConfigurationError(PrometheusTaskError):
    """Raised when task, trigger or scheduler configuration is invalid or missing."""
    pass
