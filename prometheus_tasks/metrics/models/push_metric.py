from typing import Any

from pydantic import BaseModel, Field, field_validator

from prometheus_tasks.metrics.models.metric_record import FrozenLabels


class PushMetric(BaseModel):
    """
    A user-supplied metric to push to a Pushgateway.

    Name and label keys are not validated here: malformed names are rejected
    by the remote endpoint and surface as RemoteCallFailure.
    """
    model_config = {"frozen": True}

    name: str = Field(..., min_length=1, description="Metric name")
    value: str = Field(..., description="Sample value, rendered verbatim")
    labels: dict[str, str] = Field(
        default_factory=FrozenLabels,
        description="Labels, rendered in the order given",
    )

    @field_validator("value", mode="before")
    @classmethod
    def stringify_value(cls, v: Any) -> Any:
        """Accept numeric values from configuration files."""
        if isinstance(v, bool):
            return str(v).lower()
        if isinstance(v, int | float):
            return str(v)
        return v

    @field_validator("labels", mode="before")
    @classmethod
    def default_labels(cls, v: Any) -> Any:
        """Treat ``labels: null`` as no labels."""
        return {} if v is None else v

    @field_validator("labels")
    @classmethod
    def freeze_labels(cls, v: dict[str, str]) -> dict[str, str]:
        return FrozenLabels(v)
