from prometheus_tasks.metrics.models.metric_record import FrozenLabels, MetricRecord
from prometheus_tasks.metrics.models.outputs import PushOutput, QueryOutput, TriggerEvent
from prometheus_tasks.metrics.models.push_metric import PushMetric

__all__ = [
    "FrozenLabels",
    "MetricRecord",
    "PushMetric",
    "PushOutput",
    "QueryOutput",
    "TriggerEvent",
]
