"""
Polling Query Trigger

Decides, once per tick, whether a query produces a downstream event.

STATE TRANSITION (per tick)
---------------------------
```
Idle ──tick──> Evaluating ──total == 0──> Empty  (no event)
                    │
                    ├──total > 0──> Fired  (one TriggerEvent, full FETCH output)
                    │
                    └──error──> propagated to the owning scheduler
```

The trigger is stateless between ticks: it remembers nothing about earlier
results, so an unchanged non-empty result fires again on the next tick.
Whatever fetch type is configured, a tick always runs with FETCH so the
event carries every record.
"""

from datetime import datetime, timedelta, timezone

import httpx
from pydantic import Field, field_validator

from prometheus_tasks.application.tasks.query import QueryParameters, QueryTask
from prometheus_tasks.core.config.constants import FetchType, Stage
from prometheus_tasks.core.config.settings import get_settings
from prometheus_tasks.core.logging import get_logger, invocation_scope, log_stage
from prometheus_tasks.metrics.models import TriggerEvent

logger = get_logger(__name__)


class QueryTrigger(QueryParameters):
    """
    Trigger configuration: query parameters plus an ID and a poll interval.

    Example:
        trigger = QueryTrigger(
            id="node-down",
            url="http://prometheus:9090",
            query="up == 0",
            interval=timedelta(seconds=30),
        )
        event = await trigger.evaluate()
        if event is not None:
            ...
    """

    id: str = Field(..., min_length=1, description="Trigger identifier")
    interval: timedelta = Field(
        default_factory=lambda: timedelta(seconds=get_settings().TRIGGER_DEFAULT_INTERVAL),
        description="Time between two ticks",
    )

    @field_validator("interval")
    @classmethod
    def validate_interval(cls, v: timedelta) -> timedelta:
        """Reject intervals below TRIGGER_MIN_INTERVAL."""
        minimum = get_settings().TRIGGER_MIN_INTERVAL
        if v.total_seconds() < minimum:
            raise ValueError(f"interval must be at least {minimum} seconds")
        return v

    def to_query_task(self) -> QueryTask:
        """The query run on each tick, with FETCH forced."""
        fields = self.model_dump(include=set(QueryTask.model_fields))
        fields["fetch_type"] = FetchType.FETCH
        fields["options"] = self.options
        return QueryTask(**fields)

    async def evaluate(
        self,
        now: datetime | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> TriggerEvent | None:
        """
        Run one tick.

        Args:
            now: Tick time recorded on the event (defaults to current UTC time)
            transport: Optional httpx transport (tests pass httpx.MockTransport)

        Returns:
            TriggerEvent when the query returned records, None otherwise

        Raises:
            Any query-path exception, unchanged
        """
        with invocation_scope(f"trigger-{self.id}"):
            output = await self.to_query_task().run(transport=transport)

            log_stage(
                logger,
                Stage.TRIGGER_EVALUATION,
                "Found results",
                trigger_id=self.id,
                total=output.total,
            )

            if output.total == 0:
                return None

            return TriggerEvent(
                trigger_id=self.id,
                fired_at=now or datetime.now(timezone.utc),
                output=output,
            )
