"""
Integration Tests Against Live Endpoints

Push a metric to a Pushgateway, then query it back through a Prometheus
that scrapes that Pushgateway.
"""

import os
import uuid

import pytest

from prometheus_tasks.application.tasks import PushTask, QueryTask
from prometheus_tasks.core.config.constants import FetchType
from prometheus_tasks.core.exceptions import RemoteCallFailure
from prometheus_tasks.metrics.models import PushMetric

PROMETHEUS_URL = os.getenv("PROMETHEUS_INTEGRATION_URL")
PUSHGATEWAY_URL = os.getenv("PUSHGATEWAY_INTEGRATION_URL")


@pytest.mark.integration
@pytest.mark.skipif(not PROMETHEUS_URL, reason="PROMETHEUS_INTEGRATION_URL not set")
class TestLivePrometheus:
    """Queries against a running Prometheus."""

    @pytest.mark.asyncio
    async def test_up_is_a_vector(self):
        output = await QueryTask(url=PROMETHEUS_URL, query="up", fetch_type=FetchType.FETCH).run()

        assert output.result_type == "vector"
        assert output.total == output.size

    @pytest.mark.asyncio
    async def test_scalar(self):
        output = await QueryTask(url=PROMETHEUS_URL, query="scalar(1)", fetch_type=FetchType.FETCH).run()

        assert output.result_type == "scalar"
        assert output.metrics[0].value == "1"

    @pytest.mark.asyncio
    async def test_bad_query(self):
        """Prometheus rejects unparseable PromQL with HTTP 400."""
        with pytest.raises(RemoteCallFailure) as exc_info:
            await QueryTask(url=PROMETHEUS_URL, query="sum(").run()

        assert exc_info.value.status_code == 400
        assert "parse error" in exc_info.value.body


@pytest.mark.integration
@pytest.mark.skipif(not PUSHGATEWAY_URL, reason="PUSHGATEWAY_INTEGRATION_URL not set")
class TestLivePushgateway:
    """Pushes against a running Pushgateway."""

    @pytest.mark.asyncio
    async def test_push(self):
        task = PushTask(
            url=PUSHGATEWAY_URL,
            job=f"prometheus_tasks_it_{uuid.uuid4().hex[:8]}",
            metrics=[PushMetric(name="prometheus_tasks_it_value", value="1", labels={"suite": "it"})],
        )

        output = await task.run()

        assert output.status == "success"
        assert output.code in (200, 202)
