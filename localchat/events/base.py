from __future__ import annotations

import asyncio
import inspect
import logging
from abc import ABCMeta, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from localchat.lc_types import Event

    Listener = Callable[[Event], Awaitable[Any] | None]

logger = logging.getLogger(__name__)


class BaseEventBus(metaclass=ABCMeta):
    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._background_tasks: set[asyncio.Task[Any]] = set()

    @property
    def listeners(self) -> tuple[Listener, ...]:
        return tuple(self._listeners)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        # Bound methods compare equal, not identical.
        self._listeners = [registered for registered in self._listeners if registered != listener]

    @abstractmethod
    def publish(self, event: Event) -> None: ...

    @abstractmethod
    async def drain(self) -> None: ...

    def _deliver(self, event: Event) -> None:
        # Listeners may unsubscribe themselves while being called.
        for listener in tuple(self._listeners):
            try:
                result = listener(event)
            except Exception as e:
                logger.exception(
                    "Listener %r failed on %s: %s",
                    listener,
                    type(event).__name__,
                    e.args,
                )
                continue

            if inspect.isawaitable(result):
                self._schedule(listener, event, result)

    def _schedule(self, listener: Listener, event: Event, awaitable: Awaitable[Any]) -> None:
        async def run() -> None:
            try:
                await awaitable
            except Exception as e:
                logger.exception(
                    "Listener %r failed on %s: %s",
                    listener,
                    type(event).__name__,
                    e.args,
                )

        try:
            task = asyncio.get_running_loop().create_task(run())
        except RuntimeError:
            asyncio.run(run())
            return

        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
