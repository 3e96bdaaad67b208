"""
Trigger Scheduler
=================

Owns the poll cadence of registered QueryTriggers and hands fired events to
an EventEmitter.

ARCHITECTURAL CONTEXT
---------------------
```
TriggerScheduler
   │  one asyncio task per registration
   ├─ poll loop "node-down":  tick ─> sleep(interval) ─> tick ─> ...
   ├─ poll loop "disk-full":  tick ─> sleep(interval) ─> tick ─> ...
   │
   └─ run_tick(id)
         ├─ QueryTrigger.evaluate()      (retried on transient failures)
         └─ EventEmitter.emit(event)     (only when the tick fired)
```

KEY DESIGN DECISIONS
--------------------

1. **One tick in flight per trigger**
   - A poll loop awaits its tick before sleeping, so a slow Prometheus
     delays the next tick instead of stacking ticks
   - run_tick() holds a per-trigger lock, so a manual tick waits for the
     poll loop's tick of the same trigger
   - Ticks of different triggers run concurrently

2. **Retries live here, not in the query path**
   - TransportFailure and RemoteCallFailure are retried with tenacity
     (exponential backoff with jitter)
   - Decode failures and Prometheus query errors would fail the same way
     again and are not retried
   - A tick that still fails is logged and abandoned; the next tick runs on
     schedule

3. **Graceful shutdown**
   - stop() wakes sleeping loops through a shutdown event
   - Loops stuck in a tick are cancelled after a grace period
"""

import asyncio
from datetime import datetime

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from prometheus_tasks.application.triggers.polling_trigger import QueryTrigger
from prometheus_tasks.core.config.constants import Stage
from prometheus_tasks.core.config.settings import Settings, get_settings
from prometheus_tasks.core.exceptions import (
    ConfigurationError,
    PrometheusError,
    RemoteCallFailure,
    TransportFailure,
)
from prometheus_tasks.core.interfaces import EventEmitter
from prometheus_tasks.core.logging import get_logger, invocation_scope, log_stage
from prometheus_tasks.metrics.models import TriggerEvent

logger = get_logger(__name__)

RETRYABLE_ERRORS = (TransportFailure, RemoteCallFailure)


class TriggerScheduler:
    """
    Runs registered triggers on their intervals.

    Usage:
        emitter = InMemoryEventEmitter()
        scheduler = TriggerScheduler(emitter)
        scheduler.register(QueryTrigger(id="node-down", query="up == 0"))
        await scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(
        self,
        emitter: EventEmitter,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        shutdown_timeout: float = 5.0,
    ):
        """
        Args:
            emitter: Receives fired trigger events
            settings: Retry tuning (defaults to the global settings)
            transport: Optional httpx transport used by every tick
            shutdown_timeout: Seconds stop() waits before cancelling loops
        """
        self._emitter = emitter
        self._settings = settings or get_settings()
        self._transport = transport
        self._shutdown_timeout = shutdown_timeout

        self._triggers: dict[str, QueryTrigger] = {}
        self._tasks: dict[str, asyncio.Task] = {}
        self._tick_locks: dict[str, asyncio.Lock] = {}
        self._shutdown_event = asyncio.Event()
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def trigger_ids(self) -> list[str]:
        return list(self._triggers)

    def register(self, trigger: QueryTrigger) -> None:
        """
        Add a trigger. Its poll loop starts now if the scheduler is running.

        Raises:
            ConfigurationError: A trigger with the same ID is registered
        """
        if trigger.id in self._triggers:
            raise ConfigurationError(
                f"Trigger '{trigger.id}' is already registered",
                details={"trigger_id": trigger.id},
            )

        self._triggers[trigger.id] = trigger
        self._tick_locks[trigger.id] = asyncio.Lock()
        log_stage(
            logger,
            Stage.SCHEDULER,
            "Trigger registered",
            trigger_id=trigger.id,
            interval_seconds=trigger.interval.total_seconds(),
        )

        if self._running:
            self._spawn(trigger)

    def _get(self, trigger_id: str) -> QueryTrigger:
        try:
            return self._triggers[trigger_id]
        except KeyError as e:
            raise ConfigurationError(
                f"Unknown trigger '{trigger_id}'",
                details={"trigger_id": trigger_id},
            ) from e

    def _retrying(self, trigger_id: str) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self._settings.TRIGGER_MAX_ATTEMPTS),
            wait=wait_random_exponential(
                multiplier=self._settings.TRIGGER_RETRY_BASE_DELAY,
                max=self._settings.TRIGGER_RETRY_MAX_DELAY,
            ),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            before_sleep=lambda retry_state: logger.info(
                "Retrying tick",
                stage=Stage.SCHEDULER.value,
                trigger_id=trigger_id,
                attempt=retry_state.attempt_number,
                delay=round(retry_state.idle_for, 3),
            ),
            reraise=True,
        )

    async def run_tick(self, trigger_id: str, now: datetime | None = None) -> TriggerEvent | None:
        """
        Evaluate one tick of a trigger and emit the event if it fired.

        Waits for any tick of the same trigger that is already in flight.

        Returns:
            The emitted event, or None when the tick was empty or abandoned

        Raises:
            ConfigurationError: Unknown trigger ID
        """
        trigger = self._get(trigger_id)

        async with self._tick_locks[trigger_id]:
            with invocation_scope(f"tick-{trigger_id}"):
                try:
                    event = await self._retrying(trigger_id)(
                        trigger.evaluate, now, transport=self._transport
                    )
                except PrometheusError as e:
                    logger.error(
                        "Tick abandoned",
                        stage=Stage.SCHEDULER.value,
                        trigger_id=trigger_id,
                        error=e.with_context(trigger_id=trigger_id).to_dict(),
                    )
                    return None

                if event is not None:
                    await self._emitter.emit(event)
                    log_stage(
                        logger,
                        Stage.SCHEDULER,
                        "Trigger fired",
                        trigger_id=trigger_id,
                        total=event.output.total,
                    )
                return event

    async def _poll_loop(self, trigger: QueryTrigger) -> None:
        interval = trigger.interval.total_seconds()

        while self._running and not self._shutdown_event.is_set():
            try:
                await self.run_tick(trigger.id)
            except asyncio.CancelledError:
                logger.info("Poll loop cancelled", trigger_id=trigger.id)
                raise
            except Exception as e:
                # Emitter failures must not end the loop
                logger.error(
                    "Poll loop error",
                    trigger_id=trigger.id,
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )

            try:
                await asyncio.wait_for(self._shutdown_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue

        logger.info("Poll loop stopped", trigger_id=trigger.id)

    def _spawn(self, trigger: QueryTrigger) -> None:
        task = self._tasks.get(trigger.id)
        if task is None or task.done():
            self._tasks[trigger.id] = asyncio.create_task(
                self._poll_loop(trigger), name=f"trigger-{trigger.id}"
            )

    async def start(self) -> None:
        """Start one poll loop per registered trigger."""
        if self._running:
            return

        self._running = True
        self._shutdown_event.clear()
        for trigger in self._triggers.values():
            self._spawn(trigger)

        log_stage(logger, Stage.SCHEDULER, "Scheduler started", triggers=len(self._triggers))

    async def stop(self) -> None:
        """Stop all poll loops, cancelling those that do not finish in time."""
        if not self._running:
            return

        self._running = False
        self._shutdown_event.set()

        tasks = list(self._tasks.values())
        self._tasks.clear()
        if tasks:
            done, pending = await asyncio.wait(tasks, timeout=self._shutdown_timeout)
            for task in pending:
                task.cancel()
            if pending:
                logger.warning("Poll loops cancelled on shutdown", count=len(pending))
                await asyncio.gather(*pending, return_exceptions=True)

        log_stage(logger, Stage.SCHEDULER, "Scheduler stopped")
