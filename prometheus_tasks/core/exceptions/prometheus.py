"""
Prometheus Exceptions

Exception types for calls against Prometheus-compatible query endpoints and
Pushgateway-style ingestion endpoints.

DESIGN PATTERN:
---------------
- All exceptions inherit from PrometheusTaskError
- PrometheusError is the base for every remote-call or decoding failure
- One subclass per failure category, so a scheduler can decide which
  categories are worth retrying (transport and HTTP status) and which are not
  (decoding)

None of these are recovered inside this package: they abort the current
invocation and propagate to the caller.
"""

from typing import Any

from prometheus_tasks.core.exceptions.base import PrometheusTaskError


class PrometheusError(PrometheusTaskError):
    """
    Base exception for all Prometheus-related operations.

    Example:
        try:
            output = await QueryTask(query="up").run()
        except PrometheusError as e:
            logger.error("Prometheus query failed", error=e.to_dict())
    """

    pass


class TransportFailure(PrometheusError):
    """
    Raised when the HTTP transport could not complete the exchange.

    COMMON CAUSES:
    --------------
    - Server is down or unreachable
    - DNS resolution failure
    - TLS handshake failure
    - Connect/read timeout configured through HttpClientOptions

    The original httpx exception is always chained (``raise ... from e``).
    """

    pass


class RemoteCallFailure(PrometheusError):
    """
    Raised when the remote endpoint answered with HTTP status >= 400.

    The raw response body is kept as diagnostic detail. Invalid metric names
    on push, bad PromQL on query and authentication problems all surface here.

    Attributes:
        status_code: HTTP status returned by the server
        body: Raw response body text
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        body: str,
        invocation_id: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.status_code = status_code
        self.body = body
        merged = {"status_code": status_code, "body": body, **(details or {})}
        super().__init__(message, invocation_id=invocation_id, details=merged)


class MalformedResponse(PrometheusError):
    """
    Raised when a query response body cannot be decoded.

    COMMON CAUSES:
    --------------
    - Body is not JSON (proxy error page, truncated response)
    - Envelope lacks ``status``, ``data`` or ``data.resultType``
    - ``result`` has the wrong container type for its declared result type
    - A sample timestamp is not numeric
    """

    pass


class RemoteQueryError(PrometheusError):
    """
    Raised when a well-formed envelope reports ``status != "success"``.

    The message is the server's ``error`` field verbatim, so the task runner
    can surface it unchanged. ``errorType`` (when present) is kept in details.

    Example:
        >>> RemoteQueryError("bad query", details={"error_type": "bad_data"})
    """

    pass


class UnsupportedResultType(PrometheusError):
    """
    Raised when ``data.resultType`` is none of vector, matrix, scalar, string.

    Attributes:
        result_type: The literal received from the server
    """

    def __init__(
        self,
        result_type: str,
        invocation_id: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.result_type = result_type
        super().__init__(
            f"Invalid Prometheus result type: {result_type}",
            invocation_id=invocation_id,
            details={"result_type": result_type, **(details or {})},
        )
