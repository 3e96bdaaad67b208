"""
Invocation Output Models

Outputs returned by the query task, the push task and the polling trigger.
All are frozen value objects owned by the invocation that created them.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from prometheus_tasks.metrics.models.metric_record import MetricRecord


class QueryOutput(BaseModel):
    """
    Result of a query invocation after the fetch mode has been applied.

    At most one of ``metrics``, ``metric`` and ``storage_reference`` is set,
    chosen by the fetch mode alone. ``total`` is always the number of decoded
    records, so ``total == 0`` means "no results" whatever the fetch mode.
    """
    model_config = {"frozen": True}

    size: int = Field(..., ge=0, description="Number of records materialized in this output")
    total: int = Field(..., ge=0, description="Number of records decoded from the response")
    result_type: str = Field(..., description="vector, matrix, scalar or string")
    metrics: list[MetricRecord] | None = Field(
        default=None, description="All records (FETCH only)"
    )
    metric: MetricRecord | None = Field(
        default=None, description="First record (FETCH_ONE only)"
    )
    storage_reference: str | None = Field(
        default=None, description="URI of the stored records (STORE only)"
    )


class PushOutput(BaseModel):
    """Result of a push invocation."""
    model_config = {"frozen": True}

    status: str = Field(default="success", description="Always 'success'; failures raise")
    code: int = Field(..., description="HTTP status code returned by the Pushgateway")


class TriggerEvent(BaseModel):
    """
    Event emitted by a polling trigger tick that found results.

    The scheduler hands this to an EventEmitter, which turns it into a
    downstream execution.
    """
    model_config = {"frozen": True}

    trigger_id: str = Field(..., min_length=1, description="ID of the trigger that fired")
    fired_at: datetime = Field(..., description="Tick time at which the trigger fired")
    output: QueryOutput = Field(..., description="Full query output (FETCH semantics)")

    @property
    def metrics(self) -> list[MetricRecord]:
        """Records carried by the event."""
        return self.output.metrics or []
