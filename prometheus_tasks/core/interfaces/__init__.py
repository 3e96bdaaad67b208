"""
Core Interfaces Module

Protocols for the collaborators the core talks to but does not own.

Components:
-----------
- **storage.py**: ResultSink protocol for STORE mode persistence
- **events.py**: EventEmitter protocol for fired trigger events

Interfaces follow the Protocol pattern (PEP 544) for structural subtyping:
- Runtime type checking with @runtime_checkable
- No inheritance required
- Easy mocking for tests

Usage:
------
```python
from prometheus_tasks.core.interfaces import InMemoryResultSink

sink = InMemoryResultSink()
output = await QueryTask(query="up", fetch_type=FetchType.STORE).run(sink=sink)
records = sink.read(output.storage_reference)
```
"""

from prometheus_tasks.core.interfaces.events import (
    CallbackEventEmitter,
    EventEmitter,
    InMemoryEventEmitter,
)
from prometheus_tasks.core.interfaces.storage import InMemoryResultSink, ResultSink

__all__ = [
    # Storage
    "ResultSink",
    "InMemoryResultSink",
    # Events
    "EventEmitter",
    "InMemoryEventEmitter",
    "CallbackEventEmitter",
]
