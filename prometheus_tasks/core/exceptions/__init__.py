"""
Exception Module

Structured exception hierarchy for prometheus-tasks.

Module Structure:
-----------------
- **base.py**: PrometheusTaskError base class + ConfigurationError
- **prometheus.py**: Transport, HTTP status, decoding and remote query errors

Usage:
------
```python
from prometheus_tasks.core.exceptions import RemoteQueryError, TransportFailure
```
"""

from prometheus_tasks.core.exceptions.base import ConfigurationError, PrometheusTaskError
from prometheus_tasks.core.exceptions.prometheus import (
    MalformedResponse,
    PrometheusError,
    RemoteCallFailure,
    RemoteQueryError,
    TransportFailure,
    UnsupportedResultType,
)

__all__ = [
    # Base
    "PrometheusTaskError",
    "ConfigurationError",
    # Prometheus
    "PrometheusError",
    "TransportFailure",
    "RemoteCallFailure",
    "MalformedResponse",
    "RemoteQueryError",
    "UnsupportedResultType",
]
