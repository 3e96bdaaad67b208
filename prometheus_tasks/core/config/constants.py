"""
System Constants and Enumerations

This module defines constants and enumerations shared by the query, push
and trigger paths.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for wire paths and content types
- Type-safe enums for result shapes and fetch modes
"""

from enum import Enum

from prometheus_tasks.core.exceptions import UnsupportedResultType

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Invocation stages used as the ``stage`` field in log events.

    Format: {SEQUENCE}_{DESCRIPTIVE_NAME}
    - Query and push invocations walk 1.0 -> 4.0
    - Trigger and scheduler events use alphabetic prefixes
    """

    BUILD_REQUEST = "1.0_BUILD_REQUEST"
    DISPATCH = "2.0_DISPATCH"
    DECODE = "3.0_DECODE"
    SHAPE_OUTPUT = "4.0_SHAPE_OUTPUT"

    PUSH = "P_PUSH"
    TRIGGER_EVALUATION = "T_TRIGGER_EVALUATION"
    SCHEDULER = "S_SCHEDULER"


# ============================================================================
# Prometheus Result Types
# ============================================================================


class ResultType(str, Enum):
    """
    Result encodings of the Prometheus query API.

    VECTOR: one sample per series, ``{"metric": {...}, "value": [t, v]}``
    MATRIX: many samples per series, ``{"metric": {...}, "values": [[t, v], ...]}``
    SCALAR: a single top-level ``[t, v]`` pair
    STRING: a single top-level ``[t, v]`` pair whose value is text
    """

    VECTOR = "vector"
    MATRIX = "matrix"
    SCALAR = "scalar"
    STRING = "string"

    @classmethod
    def from_string(cls, value: str) -> "ResultType":
        """
        Parse a ``resultType`` literal case-insensitively.

        Raises:
            UnsupportedResultType: If the literal is none of the four types
        """
        if isinstance(value, str):
            for result_type in cls:
                if result_type.value == value.lower():
                    return result_type
        raise UnsupportedResultType(str(value))


# ============================================================================
# Fetch Modes
# ============================================================================


class FetchType(str, Enum):
    """
    How much of a query's result set is materialized in the output.

    FETCH: output all records
    FETCH_ONE: output the first record only
    STORE: persist all records and output the storage reference
    NONE: output counts only
    """

    FETCH = "FETCH"
    FETCH_ONE = "FETCH_ONE"
    STORE = "STORE"
    NONE = "NONE"


# ============================================================================
# Wire Constants
# ============================================================================

QUERY_PATH = "/api/v1/query"
PUSH_JOB_PATH = "/metrics/job/"
PUSH_INSTANCE_PATH = "/instance/"

CONTENT_TYPE_HEADER = "Content-Type"
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_EXPOSITION = "text/plain; version=0.0.4"

STATUS_SUCCESS = "success"

DEFAULT_PROMETHEUS_URL = "http://localhost:9090"
DEFAULT_PUSHGATEWAY_URL = "http://localhost:9091"

# Responses at or above this status are classified as failures
HTTP_FAILURE_THRESHOLD = 400
