"""
Output Policy Selector

Applies the configured fetch mode to a decoded record list and builds the
QueryOutput.

FETCH MODES:
------------
- FETCH: all records in ``metrics``; size = total
- FETCH_ONE: first record (decode order) in ``metric``; size = 1 or 0
- STORE: all records written to a ResultSink; its reference in
  ``storage_reference``; size = total
- NONE: counts only; size = total

``total`` is the pre-policy record count in every mode.
"""

from collections.abc import Sequence

from prometheus_tasks.core.config.constants import FetchType, ResultType, Stage
from prometheus_tasks.core.exceptions import ConfigurationError
from prometheus_tasks.core.interfaces import ResultSink
from prometheus_tasks.core.logging import get_logger, log_stage
from prometheus_tasks.metrics.models import MetricRecord, QueryOutput

logger = get_logger(__name__)


class OutputPolicySelector:
    """
    Builds a QueryOutput from decoded records and a fetch mode.

    Attributes:
        sink: Persistence collaborator, required only for STORE
    """

    def __init__(self, sink: ResultSink | None = None):
        self.sink = sink

    async def apply(
        self,
        metrics: Sequence[MetricRecord],
        result_type: ResultType,
        mode: FetchType,
    ) -> QueryOutput:
        """
        Shape the output for ``mode``.

        Raises:
            ConfigurationError: STORE requested without a sink
        """
        mode = FetchType(mode)
        total = len(metrics)
        fields: dict = {"result_type": ResultType(result_type).value, "total": total}

        if mode is FetchType.FETCH:
            fields.update(metrics=list(metrics), size=total)
        elif mode is FetchType.FETCH_ONE:
            first = metrics[0] if metrics else None
            fields.update(metric=first, size=1 if first is not None else 0)
        elif mode is FetchType.STORE:
            if self.sink is None:
                raise ConfigurationError(
                    "fetch type STORE requires a result sink",
                    details={"fetch_type": mode.value},
                )
            reference = await self.sink.store(metrics)
            fields.update(storage_reference=reference, size=total)
        else:
            fields.update(size=total)

        log_stage(
            logger,
            Stage.SHAPE_OUTPUT,
            "Applied fetch type",
            level="debug",
            fetch_type=mode.value,
            total=total,
            size=fields["size"],
        )

        return QueryOutput(**fields)
