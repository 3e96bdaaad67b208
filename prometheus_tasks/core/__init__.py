"""
Core Module

Foundational components: configuration, exceptions, logging and the
collaborator interfaces (result sinks, event emitters).
"""

from .exceptions import (
    ConfigurationError,
    MalformedResponse,
    PrometheusError,
    PrometheusTaskError,
    RemoteCallFailure,
    RemoteQueryError,
    TransportFailure,
    UnsupportedResultType,
)
from .logging import (
    clear_invocation_id,
    get_invocation_id,
    get_logger,
    invocation_scope,
    log_stage,
    set_invocation_id,
    setup_logging,
)
