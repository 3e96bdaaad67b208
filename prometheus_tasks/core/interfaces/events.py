"""
Event Emitter Protocol

The polling trigger only decides whether a tick fires and with which
payload. Turning a TriggerEvent into a downstream execution belongs to the
owning engine, reached through this protocol.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, runtime_checkable

from prometheus_tasks.metrics.models import TriggerEvent


@runtime_checkable
class EventEmitter(Protocol):
    """
    Protocol for delivering fired trigger events.

    Implementations:
    - InMemoryEventEmitter: collects events in a list
    - CallbackEventEmitter: forwards events to an async callable
    """

    async def emit(self, event: TriggerEvent) -> None:
        """Deliver one fired trigger event."""
        ...


class InMemoryEventEmitter:
    """Collects emitted events, in emission order."""

    def __init__(self):
        self.events: list[TriggerEvent] = []

    async def emit(self, event: TriggerEvent) -> None:
        self.events.append(event)

    def for_trigger(self, trigger_id: str) -> list[TriggerEvent]:
        """Events emitted by one trigger."""
        return [event for event in self.events if event.trigger_id == trigger_id]


class CallbackEventEmitter:
    """Forwards each event to an async callback."""

    def __init__(self, callback: Callable[[TriggerEvent], Awaitable[None]]):
        if not callable(callback):
            raise TypeError("callback must be callable")
        self._callback = callback

    async def emit(self, event: TriggerEvent) -> None:
        await self._callback(event)
