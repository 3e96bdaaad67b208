"""
Result Sink Protocol

This module defines the persistence collaborator used by the STORE fetch
mode, plus an in-memory implementation for tests and embedding.

Architectural Decision: Protocol-based abstraction
- The output policy only needs "write these records, give me a reference"
- Durable storage (local files, object stores) lives outside the core
- Facilitates testing with in-memory implementations
"""

import uuid
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from prometheus_tasks.metrics.models import MetricRecord


@runtime_checkable
class ResultSink(Protocol):
    """
    Protocol for STORE-mode persistence.

    Implementations:
    - LocalFileResultSink: NDJSON files on the local filesystem
    - InMemoryResultSink: Testing/development in-memory sink

    Contract:
    - Records are written in the order given, one self-describing record
      per line (or equivalent row)
    - The returned reference is opaque to the caller and URI-like
    - The call completes before the reference is returned
    """

    async def store(self, records: Iterable[MetricRecord]) -> str:
        """
        Persist records and return a reference for later retrieval.

        Args:
            records: Decoded records, in decode order

        Returns:
            str: URI-like reference to the stored batch
        """
        ...


class InMemoryResultSink:
    """
    In-memory result sink for testing and development.

    Each call to store() keeps its batch under a fresh ``memory://`` URI.
    """

    SCHEME = "memory://"

    def __init__(self):
        self.batches: dict[str, list[MetricRecord]] = {}

    async def store(self, records: Iterable[MetricRecord]) -> str:
        reference = f"{self.SCHEME}{uuid.uuid4().hex}"
        self.batches[reference] = list(records)
        return reference

    def read(self, reference: str) -> list[MetricRecord]:
        """
        Return the batch stored under ``reference``.

        Raises:
            KeyError: If no batch was stored under that reference
        """
        return list(self.batches[reference])
