from prometheus_tasks.metrics.services.output_policy import OutputPolicySelector
from prometheus_tasks.metrics.services.push_formatter import (
    build_target_url,
    format_metric,
    format_metrics,
)
from prometheus_tasks.metrics.services.result_decoder import decode_query_response

__all__ = [
    "OutputPolicySelector",
    "build_target_url",
    "decode_query_response",
    "format_metric",
    "format_metrics",
]
