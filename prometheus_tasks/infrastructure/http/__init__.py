from prometheus_tasks.infrastructure.http.dispatcher import (
    HttpClientOptions,
    PreparedRequest,
    RequestDispatcher,
    merge_headers,
)

__all__ = [
    "HttpClientOptions",
    "PreparedRequest",
    "RequestDispatcher",
    "merge_headers",
]
