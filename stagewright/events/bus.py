"""In-process event bus with an asynchronous worker pool."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Awaitable, Callable, Dict, List, Optional, Type, Union

from ..config import load_config
from .models import WorkflowEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[WorkflowEvent], Union[Awaitable[None], None]]


class EventBus:
    """Fire-and-forget publish/subscribe channel for workflow events.

    :meth:`publish` only enqueues; worker tasks deliver each event to every
    handler subscribed to its class or one of its base classes. A failing
    handler is logged and never affects the publisher or other handlers.
    """

    def __init__(self, workers: int = 2, queue_size: int = 0) -> None:
        self._handlers: Dict[Type[WorkflowEvent], List[EventHandler]] = defaultdict(list)
        self._queue: asyncio.Queue[WorkflowEvent] = asyncio.Queue(maxsize=queue_size)
        self._worker_count = max(1, workers)
        self._workers: List[asyncio.Task] = []

    # ------------------------------------------------------------------
    # Subscription
    def subscribe(self, event_type: Type[WorkflowEvent], handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    def handlers_for(self, event_type: Type[WorkflowEvent]) -> list[EventHandler]:
        handlers: list[EventHandler] = []
        for cls in event_type.__mro__:
            handlers.extend(self._handlers.get(cls, ()))
        return handlers

    # ------------------------------------------------------------------
    # Lifecycle
    @property
    def running(self) -> bool:
        return any(not w.done() for w in self._workers)

    def start(self) -> None:
        """Spawn worker tasks on the running loop (no-op when running)."""
        if self.running:
            return
        self._workers = [
            asyncio.create_task(self._worker(), name=f"event-worker-{i}")
            for i in range(self._worker_count)
        ]

    async def join(self) -> None:
        """Wait until every queued event has been handled."""
        await self._queue.join()

    async def stop(self, drain: bool = True) -> None:
        if drain and self.running:
            await self.join()
        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []

    async def __aenter__(self) -> "EventBus":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    # ------------------------------------------------------------------
    # Publishing
    def publish(self, event: WorkflowEvent) -> bool:
        """Queue ``event`` for delivery without waiting for handlers.

        Returns ``False`` when the event had to be dropped because the queue
        is full.
        """
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(f"Event queue full, dropping {event.event_type} event {event.event_id}")
            return False
        logger.debug(f"Queued {event.event_type} event {event.event_id}")
        self.start()
        return True

    async def _worker(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self.dispatch(event)
            finally:
                self._queue.task_done()

    async def dispatch(self, event: WorkflowEvent) -> None:
        """Deliver ``event`` to its handlers, isolating handler failures."""
        for handler in self.handlers_for(type(event)):
            name = getattr(handler, "__qualname__", repr(handler))
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(
                    f"Event handler {name} failed for {event.event_type} "
                    f"event {event.event_id}"
                )


_bus_instance: Optional[EventBus] = None


def get_event_bus(workers: Optional[int] = None, queue_size: Optional[int] = None) -> EventBus:
    """Return the shared bus, creating it from configuration on first use.

    Passing ``workers`` or ``queue_size`` builds a new bus. A running bus is
    never replaced; ``await bus.stop()`` it first.
    """
    global _bus_instance
    if _bus_instance is None or workers is not None or queue_size is not None:
        if _bus_instance is not None and _bus_instance.running:
            raise RuntimeError("Stop the running event bus before reconfiguring it")
        events = load_config().events
        _bus_instance = EventBus(
            workers=workers if workers is not None else events.workers,
            queue_size=queue_size if queue_size is not None else events.queue_size,
        )
    return _bus_instance
