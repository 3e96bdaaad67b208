"""
Unit Tests for the Trigger Scheduler

Tests registration, tick retries, event emission and the poll loop.
"""

import asyncio
import warnings
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from prometheus_tasks.application.triggers import QueryTrigger, TriggerScheduler
from prometheus_tasks.core.exceptions import ConfigurationError
from prometheus_tasks.core.interfaces import InMemoryEventEmitter
from tests.test_fixtures.response_factory import PrometheusResponseFactory as R
from tests.test_fixtures.response_factory import RecordingTransport

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _ok_response() -> httpx.Response:
    return httpx.Response(200, content=R.dumps(R.vector(({"job": "x"}, 1700000000.0, "1"))))


@pytest.fixture
def emitter():
    return InMemoryEventEmitter()


@pytest.mark.unit
class TestRegistration:
    """Test trigger registration."""

    def test_register(self, emitter, fast_retry_settings):
        scheduler = TriggerScheduler(emitter, settings=fast_retry_settings)

        scheduler.register(QueryTrigger(id="a", query="up"))
        scheduler.register(QueryTrigger(id="b", query="up"))

        assert scheduler.trigger_ids == ["a", "b"]

    def test_duplicate_id_rejected(self, emitter, fast_retry_settings):
        scheduler = TriggerScheduler(emitter, settings=fast_retry_settings)
        scheduler.register(QueryTrigger(id="a", query="up"))

        with pytest.raises(ConfigurationError):
            scheduler.register(QueryTrigger(id="a", query="down"))

    @pytest.mark.asyncio
    async def test_unknown_trigger(self, emitter, fast_retry_settings):
        scheduler = TriggerScheduler(emitter, settings=fast_retry_settings)

        with pytest.raises(ConfigurationError):
            await scheduler.run_tick("missing")


@pytest.mark.unit
class TestRunTick:
    """Test a single scheduled tick."""

    @pytest.mark.asyncio
    async def test_fired_tick_emits(self, emitter, fast_retry_settings, vector_transport):
        scheduler = TriggerScheduler(emitter, settings=fast_retry_settings, transport=vector_transport)
        scheduler.register(QueryTrigger(id="a", query="up"))

        event = await scheduler.run_tick("a", NOW)

        assert event is not None
        assert emitter.events == [event]
        assert event.fired_at == NOW

    @pytest.mark.asyncio
    async def test_empty_tick_emits_nothing(self, emitter, fast_retry_settings, empty_transport):
        scheduler = TriggerScheduler(emitter, settings=fast_retry_settings, transport=empty_transport)
        scheduler.register(QueryTrigger(id="a", query="up == 0"))

        assert await scheduler.run_tick("a", NOW) is None
        assert emitter.events == []

    @pytest.mark.asyncio
    async def test_transport_failure_retried(self, emitter, fast_retry_settings):
        transport = RecordingTransport(httpx.ConnectError("refused"), _ok_response())
        scheduler = TriggerScheduler(emitter, settings=fast_retry_settings, transport=transport)
        scheduler.register(QueryTrigger(id="a", query="up"))

        event = await scheduler.run_tick("a", NOW)

        assert event is not None
        assert len(transport.requests) == 2
        assert len(emitter.events) == 1

    @pytest.mark.asyncio
    async def test_http_failure_retried(self, emitter, fast_retry_settings):
        transport = RecordingTransport(
            httpx.Response(503, text="unavailable"),
            httpx.Response(502, text="bad gateway"),
            _ok_response(),
        )
        scheduler = TriggerScheduler(emitter, settings=fast_retry_settings, transport=transport)
        scheduler.register(QueryTrigger(id="a", query="up"))

        event = await scheduler.run_tick("a", NOW)

        assert event is not None
        assert len(transport.requests) == 3

    @pytest.mark.asyncio
    async def test_tick_abandoned_after_max_attempts(self, emitter, fast_retry_settings):
        transport = RecordingTransport(httpx.Response(503, text="unavailable"))
        scheduler = TriggerScheduler(emitter, settings=fast_retry_settings, transport=transport)
        scheduler.register(QueryTrigger(id="a", query="up"))

        assert await scheduler.run_tick("a", NOW) is None
        assert len(transport.requests) == fast_retry_settings.TRIGGER_MAX_ATTEMPTS
        assert emitter.events == []

    @pytest.mark.asyncio
    async def test_query_error_not_retried(self, emitter, fast_retry_settings):
        transport = RecordingTransport.json(R.error("parse error"))
        scheduler = TriggerScheduler(emitter, settings=fast_retry_settings, transport=transport)
        scheduler.register(QueryTrigger(id="a", query="up("))

        assert await scheduler.run_tick("a", NOW) is None
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_malformed_not_retried(self, emitter, fast_retry_settings):
        transport = RecordingTransport.text("not json", 200)
        scheduler = TriggerScheduler(emitter, settings=fast_retry_settings, transport=transport)
        scheduler.register(QueryTrigger(id="a", query="up"))

        assert await scheduler.run_tick("a", NOW) is None
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_abandoned_tick_logs_trigger_context(self, emitter, fast_retry_settings):
        transport = RecordingTransport(httpx.Response(503, text="unavailable"))
        scheduler = TriggerScheduler(emitter, settings=fast_retry_settings, transport=transport)
        scheduler.register(QueryTrigger(id="a", query="up"))

        with patch("prometheus_tasks.application.triggers.scheduler.logger") as logger:
            await scheduler.run_tick("a", NOW)

        error = logger.error.call_args.kwargs["error"]
        assert error["error_type"] == "RemoteCallFailure"
        assert error["details"]["trigger_id"] == "a"

    def test_backoff_builds_without_deprecation_warnings(self, emitter, fast_retry_settings):
        scheduler = TriggerScheduler(emitter, settings=fast_retry_settings)

        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            retrying = scheduler._retrying("a")

        assert retrying.stop is not None


@pytest.mark.unit
class TestTickConcurrency:
    """Ticks of one trigger never overlap; ticks of different triggers do."""

    @staticmethod
    def _slow_transport(in_flight: dict[str, int], peak: dict[str, int]) -> httpx.MockTransport:
        async def handler(request: httpx.Request) -> httpx.Response:
            query = request.url.params["query"]
            in_flight[query] = in_flight.get(query, 0) + 1
            peak["all"] = max(peak.get("all", 0), sum(in_flight.values()))
            peak[query] = max(peak.get(query, 0), in_flight[query])
            await asyncio.sleep(0.05)
            in_flight[query] -= 1
            return _ok_response()

        return httpx.MockTransport(handler)

    @pytest.mark.asyncio
    async def test_same_trigger_ticks_serialized(self, emitter, fast_retry_settings):
        in_flight, peak = {}, {}
        scheduler = TriggerScheduler(
            emitter, settings=fast_retry_settings, transport=self._slow_transport(in_flight, peak)
        )
        scheduler.register(QueryTrigger(id="a", query="up"))

        events = await asyncio.gather(scheduler.run_tick("a", NOW), scheduler.run_tick("a", NOW))

        assert all(event is not None for event in events)
        assert peak["up"] == 1
        assert len(emitter.events) == 2

    @pytest.mark.asyncio
    async def test_different_triggers_overlap(self, emitter, fast_retry_settings):
        in_flight, peak = {}, {}
        scheduler = TriggerScheduler(
            emitter, settings=fast_retry_settings, transport=self._slow_transport(in_flight, peak)
        )
        scheduler.register(QueryTrigger(id="a", query="up"))
        scheduler.register(QueryTrigger(id="b", query="down"))

        await asyncio.gather(scheduler.run_tick("a", NOW), scheduler.run_tick("b", NOW))

        assert peak["all"] == 2

@pytest.mark.unit
class TestPollLoop:
    """Test start/stop and the poll loop."""

    @pytest.mark.asyncio
    async def test_start_runs_first_tick_and_stop_ends_loop(self, fast_retry_settings, vector_transport):
        fired = asyncio.Event()
        emitter = AsyncMock()
        emitter.emit.side_effect = lambda event: fired.set()

        scheduler = TriggerScheduler(emitter, settings=fast_retry_settings, transport=vector_transport)
        scheduler.register(QueryTrigger(id="a", query="up", interval=60))

        await scheduler.start()
        assert scheduler.is_running
        await asyncio.wait_for(fired.wait(), timeout=5)
        await scheduler.stop()

        assert not scheduler.is_running
        emitter.emit.assert_awaited_once()
        assert len(vector_transport.requests) == 1

    @pytest.mark.asyncio
    async def test_register_while_running_starts_loop(self, fast_retry_settings, vector_transport):
        fired = asyncio.Event()
        emitter = AsyncMock()
        emitter.emit.side_effect = lambda event: fired.set()

        scheduler = TriggerScheduler(emitter, settings=fast_retry_settings, transport=vector_transport)
        await scheduler.start()

        scheduler.register(QueryTrigger(id="late", query="up"))
        await asyncio.wait_for(fired.wait(), timeout=5)
        await scheduler.stop()

        assert emitter.emit.await_args.args[0].trigger_id == "late"

    @pytest.mark.asyncio
    async def test_emitter_failure_does_not_end_loop(self, fast_retry_settings, vector_transport):
        emitter = AsyncMock()
        emitter.emit.side_effect = RuntimeError("downstream unavailable")

        scheduler = TriggerScheduler(emitter, settings=fast_retry_settings, transport=vector_transport)
        scheduler.register(QueryTrigger(id="a", query="up", interval=1))

        await scheduler.start()
        await asyncio.sleep(1.5)
        await scheduler.stop()

        assert emitter.emit.await_count >= 2

    @pytest.mark.asyncio
    async def test_stop_when_not_running(self, emitter, fast_retry_settings):
        scheduler = TriggerScheduler(emitter, settings=fast_retry_settings)

        await scheduler.stop()

        assert not scheduler.is_running
