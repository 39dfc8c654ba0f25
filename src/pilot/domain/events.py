"""Minimal synchronous publish/subscribe primitive.

Listeners for an event type run in registration order. Dispatch iterates a
snapshot of the listener list taken when ``emit`` starts, so listeners
added during dispatch wait for the next emission and listeners removed
during dispatch still run once in the current pass.

INVARIANT: Listener exceptions propagate to the caller of ``emit``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

Listener = Callable[[Any], Any]


class EventEmitter:
    """Named event types with ordered listener lists."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def on(self, type: str, listener: Listener) -> Listener:
        """Register *listener* for *type*. Duplicates are invoked once per registration."""
        self._listeners.setdefault(type, []).append(listener)
        return listener

    def once(self, type: str, listener: Listener) -> Listener:
        """Register *listener* for the next emission of *type* only."""

        def wrapper(event: Any) -> Any:
            self.off(type, wrapper)
            return listener(event)

        return self.on(type, wrapper)

    def off(self, type: str, listener: Listener) -> None:
        """Remove the first registration of *listener* for *type*, if any."""
        listeners = self._listeners.get(type)
        if not listeners:
            return
        for index, registered in enumerate(listeners):
            if registered is listener or registered == listener:
                del listeners[index]
                break
        if not listeners:
            del self._listeners[type]

    def listeners(self, type: str) -> list[Listener]:
        """Return a copy of the listeners currently registered for *type*."""
        return list(self._listeners.get(type, ()))

    def emit(self, type: str, event: Any) -> None:
        """Invoke every listener registered for *type* with *event*."""
        for listener in tuple(self._listeners.get(type, ())):
            listener(event)


_SCALARS = (bool, int, float, complex, str, bytes, type(None))


def is_change(previous: Any, value: Any) -> bool:
    """Strict inequality between a stored value and a new one.

    Only the same object, or two immutable scalars of the same type that
    compare equal, count as unchanged. A distinct container or component
    is always a change, even when it compares equal.
    """
    if previous is value:
        return False
    if type(previous) is not type(value) or not isinstance(value, _SCALARS):
        return True
    return bool(previous != value)
