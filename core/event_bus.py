"""In-process event bus for window focus notifications."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

WINDOW_FOCUSED = "window_focused"
WINDOW_UNFOCUSED = "window_unfocused"

EventHandler = Callable[[dict[str, Any]], Awaitable[Any] | None]

logger = logging.getLogger("nlf.event_bus")


class EventBus:
    """Dispatches events to subscribers by event name.

    Plain handlers run inline. Coroutine handlers are scheduled as tasks when
    a loop is running, so a handler that waits does not hold up delivery of
    later events. Outside a loop they run to completion before ``emit``
    returns.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)
        self._pending: set[asyncio.Task[Any]] = set()

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        """Register a callback for an event."""
        self._handlers[event_name].append(handler)

    def emit(self, event_name: str, payload: dict[str, Any]) -> None:
        """Emit an event to all subscribers."""
        for handler in self._handlers.get(event_name, []):
            result = handler(payload)
            if inspect.isawaitable(result):
                self._schedule(event_name, result)

    def _schedule(self, event_name: str, awaitable: Awaitable[Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(_as_coroutine(awaitable))
            return
        task = loop.create_task(_as_coroutine(awaitable), name=f"nlf:{event_name}")
        self._pending.add(task)
        task.add_done_callback(self._finish)

    def _finish(self, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Event handler %s failed: %s", task.get_name(), exc, exc_info=exc)

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait until every scheduled handler has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def cancel_pending(self) -> None:
        for task in list(self._pending):
            task.cancel()


async def _as_coroutine(awaitable: Awaitable[Any]) -> Any:
    return await awaitable
