"""
prometheus-tasks

Async client tasks for Prometheus-compatible servers: PromQL instant
queries, Pushgateway pushes and polling query triggers.
"""

from prometheus_tasks.application import PushTask, QueryTask, QueryTrigger, TriggerScheduler
from prometheus_tasks.core.config import FetchType, ResultType
from prometheus_tasks.metrics.models import (
    MetricRecord,
    PushMetric,
    PushOutput,
    QueryOutput,
    TriggerEvent,
)

__version__ = "1.0.0"

__all__ = [
    "FetchType",
    "MetricRecord",
    "PushMetric",
    "PushOutput",
    "PushTask",
    "QueryOutput",
    "QueryTask",
    "QueryTrigger",
    "ResultType",
    "TriggerEvent",
    "TriggerScheduler",
]
