from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from localchat.events.base import BaseEventBus

if TYPE_CHECKING:
    from localchat.lc_types import Event

logger = logging.getLogger(__name__)


class AsyncEventBus(BaseEventBus):
    """
    Deliver events on the running event loop after a fixed delay.

    Each published event gets its own timer, so delivery order across events
    follows the timers and is not guaranteed when delays race. Outside a
    running loop events are delivered synchronously instead.

    :param delay: Seconds between publishing an event and delivering it.
    :type delay: float
    """

    def __init__(self, delay: float = 0.1) -> None:
        super().__init__()
        self.delay = delay
        self._pending: set[asyncio.Future[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def publish(self, event: Event) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Sync caller, the store write has already happened.
            logger.warning(
                "No running event loop, delivering %s synchronously",
                type(event).__name__,
            )
            self._deliver(event)
            return

        delivered: asyncio.Future[None] = loop.create_future()
        self._pending.add(delivered)
        delivered.add_done_callback(self._pending.discard)

        loop.call_later(self.delay, self._deliver_and_resolve, event, delivered)
        logger.debug("Scheduled %s in %.3fs", type(event).__name__, self.delay)

    def _deliver_and_resolve(self, event: Event, delivered: asyncio.Future[None]) -> None:
        try:
            self._deliver(event)
        finally:
            if not delivered.done():
                delivered.set_result(None)

    async def drain(self) -> None:
        """Wait until every scheduled event and listener task has finished."""
        while self._pending or self._background_tasks:
            await asyncio.gather(*self._pending, *self._background_tasks)


class ImmediateEventBus(BaseEventBus):
    """Deliver events synchronously, inside :meth:`publish`."""

    def publish(self, event: Event) -> None:
        self._deliver(event)

    async def drain(self) -> None:
        while self._background_tasks:
            await asyncio.gather(*self._background_tasks)
