"""
Request Dispatcher for Prometheus and Pushgateway Endpoints
============================================================

This module owns the request/response orchestration shared by the query and
push paths: basic auth, header merging, the HTTP exchange and the
success/failure classification of the response.

ARCHITECTURAL CONTEXT
---------------------
```
QueryTask ──┐                                   ┌── decode_query_response
            ├─> RequestDispatcher.dispatch( build_request, handle_response )
PushTask ───┘            │                      └── push_output
                         ↓
                  httpx.AsyncClient (one per call)
```

KEY DESIGN DECISIONS
--------------------

1. **Composition over inheritance**
   - Each call site supplies a request builder and a response handler
   - The dispatcher never knows which endpoint it is talking to

2. **One client per call**
   - The httpx client is opened and closed inside ``dispatch``
   - The response handler runs inside that scope, so the connection is
     released on every exit path, including decode failures

3. **Classification only, no retries**
   - Status >= 400 raises RemoteCallFailure with the raw body
   - httpx transport errors raise TransportFailure
   - Retrying is the caller's (scheduler's) decision

USAGE
-----
```python
dispatcher = RequestDispatcher(username="admin", password="secret")
result_type, records = await dispatcher.dispatch(
    lambda: PreparedRequest(method="GET", url=url, headers=headers),
    lambda response: decode_query_response(response.text),
)
```
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, Field

from prometheus_tasks.core.config.constants import (
    CONTENT_TYPE_HEADER,
    HTTP_FAILURE_THRESHOLD,
    Stage,
)
from prometheus_tasks.core.config.settings import get_settings
from prometheus_tasks.core.exceptions import RemoteCallFailure, TransportFailure
from prometheus_tasks.core.logging import get_invocation_id, get_logger, log_stage

logger = get_logger(__name__)

T = TypeVar("T")


# =============================================================================
# CONFIGURATION
# =============================================================================


class HttpClientOptions(BaseModel):
    """
    Overrides for the underlying httpx client.

    Every field is optional. Unset fields leave the httpx defaults in place;
    nothing here adds a timeout layer of its own.

    Attributes:
        timeout: Overall request timeout in seconds
        connect_timeout: Connect timeout in seconds (defaults to ``timeout``)
        verify: Verify TLS certificates
        follow_redirects: Follow 3xx responses
        proxy: Proxy URL for all requests
    """

    model_config = {"frozen": True}

    timeout: float | None = Field(default=None, gt=0, description="Request timeout in seconds")
    connect_timeout: float | None = Field(
        default=None, gt=0, description="Connect timeout in seconds"
    )
    verify: bool = Field(default=True, description="Verify TLS certificates")
    follow_redirects: bool = Field(default=False, description="Follow redirects")
    proxy: str | None = Field(default=None, description="Proxy URL")


@dataclass(frozen=True)
class PreparedRequest:
    """
    An outbound request as built by a task.

    Attributes:
        method: HTTP method
        url: Absolute URL, query string included
        headers: Final header mapping (see merge_headers)
        content: Request body, if any
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    content: str | None = None


def merge_headers(content_type: str, extra: Mapping[str, str] | None = None) -> dict[str, str]:
    """
    Build request headers: mandatory Content-Type first, caller headers after.

    Header names compare case-insensitively and the last write wins, so a
    caller-supplied ``content-type`` replaces the default.

    Args:
        content_type: Default Content-Type for the endpoint
        extra: Caller-declared headers

    Returns:
        Merged header mapping
    """
    headers = httpx.Headers({CONTENT_TYPE_HEADER: content_type})
    for name, value in (extra or {}).items():
        headers[name] = value
    return dict(headers.items())


# =============================================================================
# DISPATCHER
# =============================================================================


class RequestDispatcher:
    """
    Sends one request per dispatch() call and classifies the response.

    LIFECYCLE:
    ----------
    A dispatcher is cheap and holds no connection. Each dispatch() opens an
    ``httpx.AsyncClient``, sends the request, runs the response handler and
    closes the client before returning or raising.

    AUTHENTICATION:
    ---------------
    Basic auth is attached when both ``username`` and ``password`` are not
    None. An empty-string username still enables it.

    Attributes:
        options: httpx client overrides
    """

    def __init__(
        self,
        options: HttpClientOptions | None = None,
        username: str | None = None,
        password: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            options: Optional client overrides (timeouts, TLS, redirects, proxy)
            username: Basic auth username
            password: Basic auth password
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.options = options or HttpClientOptions()
        self._username = username
        self._password = password
        self._transport = transport

    @property
    def auth_enabled(self) -> bool:
        """True when both credentials are present."""
        return self._username is not None and self._password is not None

    def _client_kwargs(self) -> dict[str, Any]:
        """Translate options into httpx.AsyncClient arguments."""
        kwargs: dict[str, Any] = {
            "verify": self.options.verify,
            "follow_redirects": self.options.follow_redirects,
        }

        timeout = self.options.timeout
        if timeout is None:
            timeout = get_settings().HTTP_TIMEOUT
        if timeout is not None or self.options.connect_timeout is not None:
            connect = self.options.connect_timeout
            kwargs["timeout"] = httpx.Timeout(timeout, connect=connect if connect is not None else timeout)

        if self.options.proxy:
            kwargs["proxy"] = self.options.proxy
        if self.auth_enabled:
            kwargs["auth"] = httpx.BasicAuth(self._username, self._password)
        if self._transport is not None:
            kwargs["transport"] = self._transport

        return kwargs

    async def dispatch(
        self,
        build_request: Callable[[], PreparedRequest],
        handle_response: Callable[[httpx.Response], T],
    ) -> T:
        """
        Build, send and classify one request.

        Args:
            build_request: Produces the outbound request
            handle_response: Turns a successful response into the call's result

        Returns:
            Whatever ``handle_response`` returns

        Raises:
            TransportFailure: Connection, DNS, TLS or timeout error
            RemoteCallFailure: Response status >= 400
            Any exception raised by ``build_request`` or ``handle_response``
        """
        request = build_request()

        log_stage(
            logger,
            Stage.DISPATCH,
            "Dispatching request",
            level="debug",
            method=request.method,
            url=request.url,
            headers=request.headers,
            auth_enabled=self.auth_enabled,
        )

        async with httpx.AsyncClient(**self._client_kwargs()) as client:
            try:
                response = await client.request(
                    request.method,
                    request.url,
                    headers=request.headers,
                    content=request.content,
                )
            except httpx.TransportError as e:
                raise TransportFailure.from_exception(
                    e,
                    message=f"Cannot reach {request.url}: {e}",
                    invocation_id=get_invocation_id(),
                    url=request.url,
                    method=request.method,
                ) from e

            if response.status_code >= HTTP_FAILURE_THRESHOLD:
                logger.warning(
                    "Remote call failed",
                    url=request.url,
                    status_code=response.status_code,
                )
                raise RemoteCallFailure(
                    f"Prometheus call failed: {response.text}",
                    status_code=response.status_code,
                    body=response.text,
                    invocation_id=get_invocation_id(),
                    details={"url": request.url, "method": request.method},
                )

            log_stage(
                logger,
                Stage.DISPATCH,
                "Remote call succeeded",
                level="debug",
                url=request.url,
                status_code=response.status_code,
            )

            return handle_response(response)
