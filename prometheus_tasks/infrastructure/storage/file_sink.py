"""
Local File Result Sink

Persists STORE-mode query results as newline-delimited JSON, one record per
line, and hands back a ``file://`` URI for later retrieval.

Line format:
    {"labels":{"job":"node"},"timestamp":1700000000.0,"value":"1"}

File I/O runs in a worker thread so the event loop is not blocked while a
large matrix result is written.
"""

import asyncio
import uuid
from collections.abc import Iterable, Iterator
from pathlib import Path
from urllib.parse import unquote, urlparse

import orjson

from prometheus_tasks.core.config.settings import get_settings
from prometheus_tasks.core.logging import get_logger
from prometheus_tasks.metrics.models import MetricRecord

logger = get_logger(__name__)


class LocalFileResultSink:
    """
    ResultSink writing NDJSON files under a base directory.

    Each store() call creates a new uniquely named file, so concurrent
    invocations never share a file.

    Example:
        sink = LocalFileResultSink("/var/lib/prometheus-tasks")
        output = await QueryTask(query="up", fetch_type=FetchType.STORE).run(sink=sink)
        for record in sink.read(output.storage_reference):
            ...
    """

    SUFFIX = ".ndjson"

    def __init__(self, base_dir: str | Path | None = None):
        self.base_dir = Path(base_dir) if base_dir is not None else get_settings().RESULT_STORAGE_DIR

    async def store(self, records: Iterable[MetricRecord]) -> str:
        """
        Write records to a new file.

        Returns:
            str: ``file://`` URI of the written file
        """
        path = self.base_dir / f"{uuid.uuid4().hex}{self.SUFFIX}"
        count = await asyncio.to_thread(self._write, path, list(records))

        logger.debug("Stored query results", path=str(path), records=count)
        return path.resolve().as_uri()

    def _write(self, path: Path, records: list[MetricRecord]) -> int:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            for record in records:
                f.write(orjson.dumps(record.model_dump(), option=orjson.OPT_APPEND_NEWLINE))
        return len(records)

    @staticmethod
    def path_from_uri(uri: str) -> Path:
        """
        Resolve a ``file://`` URI returned by store().

        Raises:
            ValueError: If the URI is not a file URI
        """
        parsed = urlparse(uri)
        if parsed.scheme != "file":
            raise ValueError(f"Not a file URI: {uri}")
        return Path(unquote(parsed.path))

    def read(self, uri: str) -> Iterator[MetricRecord]:
        """Stream the records stored under ``uri``, in stored order."""
        with open(self.path_from_uri(uri), "rb") as f:
            for line in f:
                if line.strip():
                    yield MetricRecord.model_validate(orjson.loads(line))
