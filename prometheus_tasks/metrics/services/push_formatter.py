"""
Pushgateway Formatter

Renders PushMetric values in the Prometheus text exposition format and
builds the Pushgateway grouping URL.

Body format (every line newline-terminated):
    kestra_test_metric{env="test",app="kestra"} 123
    build_duration_seconds 42.5

Metric names and label keys are sent as given; the Pushgateway rejects
invalid ones with a 400, which the dispatcher reports as RemoteCallFailure.
"""

from collections.abc import Iterable
from urllib.parse import quote

from prometheus_tasks.core.config.constants import PUSH_INSTANCE_PATH, PUSH_JOB_PATH
from prometheus_tasks.metrics.models import PushMetric


def build_target_url(base: str, job: str, instance: str | None = None) -> str:
    """
    Build ``<base>/metrics/job/<job>[/instance/<instance>]``.

    Job and instance are percent-encoded as single path segments.
    """
    url = base.rstrip("/") + PUSH_JOB_PATH + quote(job, safe="")
    if instance is not None:
        url += PUSH_INSTANCE_PATH + quote(instance, safe="")
    return url


def format_metric(metric: PushMetric) -> str:
    """Render one metric line, without the trailing newline."""
    if metric.labels:
        labels = ",".join(f'{key}="{value}"' for key, value in metric.labels.items())
        return f"{metric.name}{{{labels}}} {metric.value}"
    return f"{metric.name} {metric.value}"


def format_metrics(metrics: Iterable[PushMetric]) -> str:
    """Render a push body; each line, the last included, ends with a newline."""
    return "\n".join(format_metric(metric) for metric in metrics) + "\n"
