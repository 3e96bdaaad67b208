"""
Unit Tests for the Polling Query Trigger

Tests the per-tick Empty/Fired decision.
"""

from datetime import datetime, timedelta, timezone

import httpx
import pytest
from pydantic import ValidationError

from prometheus_tasks.application.triggers import QueryTrigger
from prometheus_tasks.core.config.constants import FetchType
from prometheus_tasks.core.exceptions import RemoteCallFailure, RemoteQueryError, TransportFailure
from prometheus_tasks.infrastructure.http import HttpClientOptions
from tests.test_fixtures.response_factory import PrometheusResponseFactory as R
from tests.test_fixtures.response_factory import RecordingTransport

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.unit
class TestQueryTriggerConfiguration:
    """Test trigger validation."""

    def test_default_interval(self):
        assert QueryTrigger(id="t", query="up").interval == timedelta(seconds=60)

    def test_interval_from_seconds(self):
        assert QueryTrigger(id="t", query="up", interval=30).interval == timedelta(seconds=30)

    def test_interval_minimum(self):
        with pytest.raises(ValidationError):
            QueryTrigger(id="t", query="up", interval=timedelta(milliseconds=500))

    def test_interval_at_minimum_accepted(self):
        assert QueryTrigger(id="t", query="up", interval=timedelta(seconds=1)).interval.total_seconds() == 1

    def test_id_required(self):
        with pytest.raises(ValidationError):
            QueryTrigger(id="", query="up")

    def test_query_task_forces_fetch(self):
        trigger = QueryTrigger(
            id="t",
            url="http://prom:9090",
            query="up == 0",
            time="1700000000",
            fetch_type=FetchType.NONE,
            username="admin",
            password="secret",
            headers={"X-Tenant": "a"},
            options=HttpClientOptions(timeout=5),
        )

        task = trigger.to_query_task()

        assert task.fetch_type is FetchType.FETCH
        assert task.url == "http://prom:9090"
        assert task.query == "up == 0"
        assert task.time == "1700000000"
        assert task.username == "admin"
        assert task.password == "secret"
        assert task.headers == {"X-Tenant": "a"}
        assert task.options == HttpClientOptions(timeout=5)


@pytest.mark.unit
class TestQueryTriggerEvaluate:
    """Test one tick."""

    @pytest.mark.asyncio
    async def test_empty_result_gives_no_event(self, empty_transport):
        trigger = QueryTrigger(id="t", query="up == 0")

        assert await trigger.evaluate(NOW, transport=empty_transport) is None

    @pytest.mark.asyncio
    async def test_results_fire_one_event(self, vector_transport):
        trigger = QueryTrigger(id="node-check", query="up")

        event = await trigger.evaluate(NOW, transport=vector_transport)

        assert event.trigger_id == "node-check"
        assert event.fired_at == NOW
        assert event.output.total == 2
        assert event.output.size == 2
        assert [r.value for r in event.metrics] == ["1", "0"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("fetch_type", [FetchType.NONE, FetchType.FETCH_ONE, FetchType.STORE])
    async def test_fetch_forced_whatever_is_configured(self, vector_transport, fetch_type):
        trigger = QueryTrigger(id="t", query="up", fetch_type=fetch_type)

        event = await trigger.evaluate(NOW, transport=vector_transport)

        assert len(event.output.metrics) == 2
        assert event.output.storage_reference is None

    @pytest.mark.asyncio
    async def test_fired_at_defaults_to_now(self, vector_transport):
        before = datetime.now(timezone.utc)

        event = await QueryTrigger(id="t", query="up").evaluate(transport=vector_transport)

        assert event.fired_at >= before

    @pytest.mark.asyncio
    async def test_no_deduplication(self, vector_transport):
        """An unchanged non-empty result fires on every tick."""
        trigger = QueryTrigger(id="t", query="up")

        first = await trigger.evaluate(NOW, transport=vector_transport)
        second = await trigger.evaluate(NOW + trigger.interval, transport=vector_transport)

        assert first is not None
        assert second is not None
        assert first.output == second.output
        assert len(vector_transport.requests) == 2

    @pytest.mark.asyncio
    async def test_scalar_fires(self):
        transport = RecordingTransport.json(R.scalar(1700000000, "0"))

        event = await QueryTrigger(id="t", query="scalar(0)").evaluate(NOW, transport=transport)

        assert event is not None
        assert event.output.total == 1


@pytest.mark.unit
class TestQueryTriggerFailures:
    """Query-path failures propagate to the scheduler."""

    @pytest.mark.asyncio
    async def test_remote_query_error(self):
        transport = RecordingTransport.json(R.error("parse error"))

        with pytest.raises(RemoteQueryError):
            await QueryTrigger(id="t", query="up(").evaluate(NOW, transport=transport)

    @pytest.mark.asyncio
    async def test_http_failure(self):
        transport = RecordingTransport.text("down", 503)

        with pytest.raises(RemoteCallFailure):
            await QueryTrigger(id="t", query="up").evaluate(NOW, transport=transport)

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        transport = RecordingTransport(httpx.ConnectError("refused"))

        with pytest.raises(TransportFailure):
            await QueryTrigger(id="t", query="up").evaluate(NOW, transport=transport)
