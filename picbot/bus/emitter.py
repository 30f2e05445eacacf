"""Named-event registry used to discover optional capabilities at runtime."""

import asyncio
import inspect
from collections.abc import Callable
from typing import Any

from loguru import logger

Listener = Callable[..., Any]


class EventEmitter:
    """
    Registration table mapping event names to listeners.

    Listeners may be plain callables or coroutine functions. Coroutines are
    scheduled on the running loop and kept referenced until they finish.
    """

    def __init__(self):
        self._listeners: dict[str, list[Listener]] = {}
        self._tasks: set[asyncio.Task] = set()

    def on(self, event: str, listener: Listener) -> None:
        """Register a listener for an event."""
        self._listeners.setdefault(event, []).append(listener)

    def off(self, event: str, listener: Listener) -> None:
        """Remove a listener; unknown listeners are ignored."""
        listeners = self._listeners.get(event)
        if not listeners or listener not in listeners:
            return
        listeners.remove(listener)
        if not listeners:
            del self._listeners[event]

    def listeners(self, event: str) -> list[Listener]:
        """Return a copy of the listeners registered for an event."""
        return list(self._listeners.get(event, ()))

    def has_listeners(self, event: str) -> bool:
        return bool(self._listeners.get(event))

    def emit(self, event: str, *args: Any) -> int:
        """
        Call every listener of ``event`` with ``args``.

        Returns:
            Number of listeners invoked.
        """
        listeners = self.listeners(event)
        for listener in listeners:
            try:
                result = listener(*args)
            except Exception as e:
                logger.error("Listener for {} failed: {}", event, e)
                continue
            if inspect.isawaitable(result):
                self._schedule(event, result)
        return len(listeners)

    def _schedule(self, event: str, awaitable: Any) -> None:
        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)

        def _done(t: asyncio.Task) -> None:
            self._tasks.discard(t)
            if t.cancelled():
                return
            exc = t.exception()
            if exc is not None:
                logger.error("Async listener for {} failed: {}", event, exc)

        task.add_done_callback(_done)
