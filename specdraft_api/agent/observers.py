"""
Listener registry shared by the action executor and the agent controller.

Owners call ``notify_listeners()`` at the points where their observable
state changed. Listeners take no arguments and read whatever projections
they need from the owner.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, List, Set, Union

logger = logging.getLogger(__name__)

Listener = Callable[[], Union[None, Awaitable[None]]]


class Observable:
    """Explicit subscribe/notify mechanism."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []
        self._pending: Set["asyncio.Task[Any]"] = set()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            self.unsubscribe(listener)

        return _unsubscribe

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify_listeners(self) -> None:
        # Snapshot so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                result = listener()
                if inspect.isawaitable(result):
                    self._schedule(result)
            except Exception:
                logger.exception(f"Listener {listener!r} failed")

    def _schedule(self, awaitable: Awaitable[None]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(_await(awaitable))
            return
        task = loop.create_task(_await(awaitable))
        self._pending.add(task)
        task.add_done_callback(self._on_listener_done)

    def _on_listener_done(self, task: "asyncio.Task[Any]") -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Async listener failed", exc_info=task.exception())


async def _await(awaitable: Awaitable[None]) -> None:
    await awaitable
