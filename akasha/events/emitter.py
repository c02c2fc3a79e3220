"""
Event Emitter

Observer interface between the pipelines and subscribers. ``emit`` never
runs a handler inline, so a slow or failing subscriber cannot block or
break the operation that emitted the event.

Delivery:
    - Inside a running event loop each handler is scheduled with
      ``loop.call_soon``; coroutine handlers become tasks.
    - Without a running loop events are queued and delivered on the next
      ``emit`` from inside a loop, or by ``flush()``. The queue holds at
      most ``max_pending`` deliveries; the oldest are dropped beyond that.
    - Handler exceptions are logged and swallowed.

Example:
    >>> events = EventEmitter()
    >>> events.on(EventType.ENTITY_CREATED, lambda e: print(e.entity.name))
    >>> events.emit(AkashaEvent(type=EventType.ENTITY_CREATED, entity=entity))
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict, deque
from collections.abc import Callable
from typing import Any

from akasha.events.types import AkashaEvent, EventType

logger = logging.getLogger(__name__)

EventHandler = Callable[[AkashaEvent], Any]

DEFAULT_MAX_PENDING = 1000


class EventEmitter:
    """
    Fire-and-forget event dispatch.

    Args:
        max_pending: Deliveries kept while no loop is running; the oldest
            are dropped beyond it
    """

    def __init__(self, max_pending: int = DEFAULT_MAX_PENDING) -> None:
        if max_pending < 1:
            raise ValueError(f"max_pending must be >= 1, got {max_pending}")
        self.max_pending = max_pending
        self._handlers: dict[EventType, list[EventHandler]] = defaultdict(list)
        self._once_handlers: dict[EventType, list[EventHandler]] = defaultdict(list)
        self._pending: deque[tuple[EventHandler, AkashaEvent]] = deque()
        self._tasks: set[asyncio.Task[Any]] = set()

    def on(self, event_type: EventType | str, handler: EventHandler) -> None:
        """Register a handler (sync or async)."""
        self._handlers[EventType(event_type)].append(handler)

    def once(self, event_type: EventType | str, handler: EventHandler) -> None:
        """Register a handler that is removed after its first event."""
        self._once_handlers[EventType(event_type)].append(handler)

    def off(self, event_type: EventType | str, handler: EventHandler) -> None:
        """Remove a handler; unknown handlers are ignored."""
        event_type = EventType(event_type)
        for registry in (self._handlers, self._once_handlers):
            if handler in registry[event_type]:
                registry[event_type].remove(handler)

    def listener_count(self, event_type: EventType | str) -> int:
        event_type = EventType(event_type)
        return len(self._handlers[event_type]) + len(self._once_handlers[event_type])

    def emit(self, event: AkashaEvent) -> None:
        """Schedule every handler registered for ``event.type``."""
        handlers = list(self._handlers[event.type])
        handlers.extend(self._once_handlers.pop(event.type, []))
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            for handler in handlers:
                if len(self._pending) >= self.max_pending:
                    _, dropped = self._pending.popleft()
                    logger.debug(f"Event queue full, dropping {dropped.type.value} delivery")
                self._pending.append((handler, event))
            return

        pending, self._pending = self._pending, deque()
        pending.extend((handler, event) for handler in handlers)
        for handler, queued in pending:
            loop.call_soon(self._run_handler, handler, queued)

    def flush(self) -> None:
        """Deliver queued events now (outside an event loop)."""
        pending, self._pending = self._pending, deque()
        for handler, event in pending:
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    asyncio.run(_await(result))
            except Exception:
                logger.exception(f"Error in event handler for {event.type.value}")

    async def drain(self) -> None:
        """Wait until scheduled handlers (including async ones) have finished."""
        await asyncio.sleep(0)
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
            await asyncio.sleep(0)

    def _run_handler(self, handler: EventHandler, event: AkashaEvent) -> None:
        try:
            result = handler(event)
        except Exception:
            logger.exception(f"Error in event handler for {event.type.value}")
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(lambda t: self._task_done(t, event))

    def _task_done(self, task: asyncio.Task[Any], event: AkashaEvent) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"Error in event handler for {event.type.value}",
                exc_info=(type(error), error, error.__traceback__),
            )


async def _await(awaitable: Any) -> Any:
    return await awaitable
