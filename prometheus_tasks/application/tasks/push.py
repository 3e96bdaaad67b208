"""
Push Task

Pushes user-supplied metrics to a Pushgateway grouping key with
``POST <url>/metrics/job/<job>[/instance/<instance>]`` and the text
exposition format.

Any response under 400 counts as success; the status code is returned so
callers can tell 200 from 202.
"""

import httpx
from pydantic import Field

from prometheus_tasks.application.tasks.connection import ConnectionConfig
from prometheus_tasks.core.config.constants import CONTENT_TYPE_EXPOSITION, Stage
from prometheus_tasks.core.config.settings import get_settings
from prometheus_tasks.core.logging import get_logger, invocation_scope, log_stage
from prometheus_tasks.infrastructure.http import PreparedRequest, merge_headers
from prometheus_tasks.metrics.models import PushMetric, PushOutput
from prometheus_tasks.metrics.services import build_target_url, format_metrics

logger = get_logger(__name__)


class PushTask(ConnectionConfig):
    """
    A single push invocation.

    Example:
        task = PushTask(
            job="nightly_build",
            instance="ci-1",
            metrics=[PushMetric(name="build_duration_seconds", value="42.5")],
        )
        output = await task.run()  # PushOutput(status="success", code=200)
    """

    url: str = Field(
        default_factory=lambda: get_settings().PUSHGATEWAY_URL,
        min_length=1,
        description="Pushgateway URL",
    )
    job: str = Field(..., min_length=1, description="Job label of the grouping key")
    instance: str | None = Field(default=None, description="Instance label of the grouping key")
    metrics: list[PushMetric] = Field(..., description="Metrics to push, in order")

    @property
    def target_url(self) -> str:
        return build_target_url(self.url, self.job, self.instance)

    def build_request(self) -> PreparedRequest:
        return PreparedRequest(
            method="POST",
            url=self.target_url,
            headers=merge_headers(CONTENT_TYPE_EXPOSITION, self.headers),
            content=format_metrics(self.metrics),
        )

    async def run(self, transport: httpx.AsyncBaseTransport | None = None) -> PushOutput:
        """
        Push the metrics.

        Raises:
            TransportFailure: Pushgateway unreachable
            RemoteCallFailure: HTTP status >= 400 (e.g. an invalid metric name)
        """
        with invocation_scope("push"):
            log_stage(
                logger,
                Stage.PUSH,
                "Pushing metrics",
                url=self.target_url,
                metric_count=len(self.metrics),
            )

            code = await self.dispatcher(transport).dispatch(
                self.build_request,
                lambda response: response.status_code,
            )

            logger.info("Metrics pushed", job=self.job, instance=self.instance, code=code)
            return PushOutput(status="success", code=code)
