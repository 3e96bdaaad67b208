"""Result sinks implementing core.interfaces.ResultSink."""

from prometheus_tasks.infrastructure.storage.file_sink import LocalFileResultSink

__all__ = ["LocalFileResultSink"]
