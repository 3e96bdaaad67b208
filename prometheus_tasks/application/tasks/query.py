"""
Query Task

Runs one PromQL instant query against ``GET <url>/api/v1/query`` and shapes
the decoded records according to the configured fetch type.

INVOCATION FLOW
---------------
```
QueryTask.run()
   │
   ├─ 1.0 build_request()      GET <url>/api/v1/query?query=...[&time=...]
   ├─ 2.0 RequestDispatcher    auth, headers, status classification
   ├─ 3.0 decode_query_response  vector / matrix / scalar / string -> records
   └─ 4.0 OutputPolicySelector   FETCH / FETCH_ONE / STORE / NONE
```

The query string is opaque: it is URL-encoded and evaluated by the server.
``time`` (RFC3339 or Unix timestamp text) is forwarded verbatim.

USAGE
-----
```python
task = QueryTask(
    url="http://prometheus:9090",
    query='up{job="node"}',
    fetch_type=FetchType.FETCH,
)
output = await task.run()
for record in output.metrics:
    print(record.labels, record.value)
```
"""

from urllib.parse import urlencode

import httpx
from pydantic import Field

from prometheus_tasks.application.tasks.connection import ConnectionConfig
from prometheus_tasks.core.config.constants import CONTENT_TYPE_JSON, QUERY_PATH, FetchType, Stage
from prometheus_tasks.core.config.settings import get_settings
from prometheus_tasks.core.interfaces import ResultSink
from prometheus_tasks.core.logging import get_logger, invocation_scope, log_stage
from prometheus_tasks.infrastructure.http import PreparedRequest, merge_headers
from prometheus_tasks.metrics.models import QueryOutput
from prometheus_tasks.metrics.services import OutputPolicySelector, decode_query_response

logger = get_logger(__name__)


class QueryParameters(ConnectionConfig):
    """
    Everything needed to issue one instant query.

    Shared by QueryTask and the polling trigger.
    """

    url: str = Field(
        default_factory=lambda: get_settings().PROMETHEUS_URL,
        min_length=1,
        description="Prometheus server URL",
    )
    query: str = Field(..., min_length=1, description="PromQL expression")
    time: str | None = Field(
        default=None, description="Evaluation time (RFC3339 or Unix timestamp)"
    )
    fetch_type: FetchType = Field(default=FetchType.NONE, description="How results are returned")

    def build_request(self) -> PreparedRequest:
        """Build ``GET <url>/api/v1/query?query=...[&time=...]``."""
        params = {"query": self.query}
        if self.time is not None:
            params["time"] = self.time

        return PreparedRequest(
            method="GET",
            url=f"{self.base_url}{QUERY_PATH}?{urlencode(params)}",
            headers=merge_headers(CONTENT_TYPE_JSON, self.headers),
        )


class QueryTask(QueryParameters):
    """
    A single query invocation.

    The model is immutable and can be run any number of times; every run
    opens and closes its own HTTP client.
    """

    async def run(
        self,
        sink: ResultSink | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> QueryOutput:
        """
        Execute the query.

        Args:
            sink: Result sink, required when ``fetch_type`` is STORE
            transport: Optional httpx transport (tests pass httpx.MockTransport)

        Returns:
            QueryOutput shaped by ``fetch_type``

        Raises:
            TransportFailure: Endpoint unreachable
            RemoteCallFailure: HTTP status >= 400
            MalformedResponse: Response body cannot be decoded
            RemoteQueryError: Prometheus reported an error (e.g. bad PromQL)
            UnsupportedResultType: Unknown ``resultType``
            ConfigurationError: STORE without a sink
        """
        with invocation_scope("query"):
            log_stage(
                logger,
                Stage.BUILD_REQUEST,
                "Running query",
                query=self.query,
                fetch_type=self.fetch_type.value,
            )

            result_type, records = await self.dispatcher(transport).dispatch(
                self.build_request,
                lambda response: decode_query_response(response.content),
            )

            output = await OutputPolicySelector(sink).apply(records, result_type, self.fetch_type)

            logger.info(
                "Query completed",
                result_type=output.result_type,
                total=output.total,
                size=output.size,
            )
            return output
