"""
Prometheus Query Response Decoder

Flattens the four result encodings of the Prometheus query API into one
list of MetricRecord values.

PROMETHEUS RESULT TYPES:
------------------------
1. **vector**: ``[{"metric": {...}, "value": [t, "v"]}, ...]``
   One record per series. A series whose ``value`` has fewer than two
   elements carries no sample and is skipped.

2. **matrix**: ``[{"metric": {...}, "values": [[t1, "v1"], [t2, "v2"]]}, ...]``
   One record per pair. A series without ``values`` yields nothing; short
   pairs are skipped.

3. **scalar**: ``[t, "v"]``
   At most one record, empty labels.

4. **string**: ``[t, "text"]``
   Same extraction as scalar; only the result type tag differs.

Everything else (unparseable body, missing envelope fields, wrong container
types, non-numeric timestamps) is a hard failure. No partial result list is
ever returned.
"""

from collections.abc import Callable
from typing import Any

import orjson

from prometheus_tasks.core.config.constants import STATUS_SUCCESS, ResultType, Stage
from prometheus_tasks.core.exceptions import MalformedResponse, RemoteQueryError
from prometheus_tasks.core.logging import get_logger, log_stage
from prometheus_tasks.metrics.models import MetricRecord

logger = get_logger(__name__)


def _as_text(value: Any) -> str:
    """Render a JSON scalar the way it appeared on the wire."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, int | float):
        return str(value)
    return orjson.dumps(value).decode("utf-8")


def _extract_labels(metric: Any) -> dict[str, str]:
    """Copy a series' ``metric`` object into a label mapping."""
    if metric is None:
        return {}
    if not isinstance(metric, dict):
        raise MalformedResponse(
            "Series 'metric' field is not an object",
            details={"metric": _as_text(metric)},
        )
    return {str(name): _as_text(value) for name, value in metric.items()}


def _is_sample(pair: Any) -> bool:
    return isinstance(pair, list) and len(pair) > 1


def _to_record(labels: dict[str, str], pair: list[Any]) -> MetricRecord:
    try:
        timestamp = float(pair[0])
    except (TypeError, ValueError) as e:
        raise MalformedResponse(
            f"Invalid sample timestamp: {pair[0]!r}",
            details={"timestamp": _as_text(pair[0])},
        ) from e

    return MetricRecord(labels=dict(labels), timestamp=timestamp, value=_as_text(pair[1]))


def _series_list(result: Any, result_type: ResultType) -> list[dict[str, Any]]:
    if not isinstance(result, list):
        raise MalformedResponse(
            f"Expected a list of series for result type '{result_type.value}'",
            details={"result_type": result_type.value},
        )
    for series in result:
        if not isinstance(series, dict):
            raise MalformedResponse(
                "Series entry is not an object",
                details={"result_type": result_type.value},
            )
    return result


def _decode_vector(result: Any) -> list[MetricRecord]:
    records = []
    for series in _series_list(result, ResultType.VECTOR):
        labels = _extract_labels(series.get("metric"))
        value = series.get("value")
        if _is_sample(value):
            records.append(_to_record(labels, value))
    return records


def _decode_matrix(result: Any) -> list[MetricRecord]:
    records = []
    for series in _series_list(result, ResultType.MATRIX):
        labels = _extract_labels(series.get("metric"))
        values = series.get("values")
        if values is None:
            continue
        if not isinstance(values, list):
            raise MalformedResponse(
                "Series 'values' field is not a list",
                details={"result_type": ResultType.MATRIX.value},
            )
        for pair in values:
            if _is_sample(pair):
                records.append(_to_record(labels, pair))
    return records


def _decode_single_pair(result: Any) -> list[MetricRecord]:
    # scalar and string share the top-level [t, v] layout
    if _is_sample(result):
        return [_to_record({}, result)]
    return []


_DECODERS: dict[ResultType, Callable[[Any], list[MetricRecord]]] = {
    ResultType.VECTOR: _decode_vector,
    ResultType.MATRIX: _decode_matrix,
    ResultType.SCALAR: _decode_single_pair,
    ResultType.STRING: _decode_single_pair,
}


def _parse_envelope(body: str | bytes) -> dict[str, Any]:
    try:
        envelope = orjson.loads(body)
    except orjson.JSONDecodeError as e:
        raise MalformedResponse(
            "Prometheus response is not valid JSON",
            details={"original_message": str(e), "body": _excerpt(body)},
        ) from e

    if not isinstance(envelope, dict) or "status" not in envelope:
        raise MalformedResponse(
            "Prometheus response has no 'status' field",
            details={"body": _excerpt(body)},
        )
    return envelope


def _excerpt(body: str | bytes, limit: int = 500) -> str:
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    return text[:limit]


def decode_query_response(body: str | bytes) -> tuple[ResultType, list[MetricRecord]]:
    """
    Decode a Prometheus query API response body.

    Args:
        body: Raw response body

    Returns:
        The declared result type and the flattened records, in response order

    Raises:
        MalformedResponse: Body or envelope cannot be decoded
        RemoteQueryError: Envelope reports ``status != "success"``
        UnsupportedResultType: ``resultType`` is not one of the four known types

    Example:
        >>> decode_query_response(
        ...     '{"status":"success","data":{"resultType":"scalar","result":[1700000000,"5"]}}'
        ... )
        (<ResultType.SCALAR: 'scalar'>, [MetricRecord(labels={}, timestamp=1700000000.0, value='5')])
    """
    envelope = _parse_envelope(body)

    if envelope["status"] != STATUS_SUCCESS:
        error = envelope.get("error")
        raise RemoteQueryError(
            _as_text(error) if error is not None else "Unknown error",
            details={
                "status": _as_text(envelope["status"]),
                "error_type": envelope.get("errorType"),
            },
        )

    data = envelope.get("data")
    if not isinstance(data, dict) or "resultType" not in data:
        raise MalformedResponse(
            "Prometheus response has no 'data.resultType' field",
            details={"body": _excerpt(body)},
        )

    result_type = ResultType.from_string(data["resultType"])
    records = _DECODERS[result_type](data.get("result"))

    log_stage(
        logger,
        Stage.DECODE,
        "Decoded query response",
        level="debug",
        result_type=result_type.value,
        total=len(records),
    )

    return result_type, records
