from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Self

from localchat.config import Settings
from localchat.events import AsyncEventBus, ImmediateEventBus
from localchat.ids import IdGenerator
from localchat.services import AuthService, MessageService
from localchat.storage import JSONFileStorage, MemoryStorage, SQLiteStorage
from localchat.store import PersistentStore

if TYPE_CHECKING:
    from types import TracebackType

    from localchat.events import BaseEventBus
    from localchat.storage import BaseStorage

logger = logging.getLogger(__name__)


def create_storage(settings: Settings) -> BaseStorage:
    match settings.storage.backend:
        case "memory":
            return MemoryStorage()
        case "file":
            return JSONFileStorage(
                Path(settings.storage.path),
                storage_key=settings.storage.encryption_key,
            )
        case "sqlite":
            return SQLiteStorage.from_url(settings.storage.sqlite_url)

    msg = f"Unknown storage backend: {settings.storage.backend}"
    raise ValueError(msg)


def create_event_bus(settings: Settings) -> BaseEventBus:
    if settings.events.mode == "immediate":
        return ImmediateEventBus()
    return AsyncEventBus(delay=settings.events.delay)


class ChatApplication:
    """
    Application root: builds the services and owns their lifecycle.

    Both services share one store, one id generator and one event bus.
    """

    def __init__(
        self,
        storage: BaseStorage,
        event_bus: BaseEventBus,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.storage = storage
        self.event_bus = event_bus
        self.store = PersistentStore(storage, self.settings.storage)
        self.id_generator = IdGenerator()
        self.is_closed = False

        self._observe_stored_ids()

        self.auth = AuthService(
            self.store,
            self.id_generator,
            recent_logins_limit=self.settings.recent_logins_limit,
        )
        self.messages = MessageService(self.store, self.id_generator, self.event_bus)

    @classmethod
    def from_settings(cls, settings: Settings) -> Self:
        app = cls(create_storage(settings), create_event_bus(settings), settings)
        logger.info(
            "Started with %s storage and %s event delivery",
            settings.storage.backend,
            settings.events.mode,
        )
        return app

    def _observe_stored_ids(self) -> None:
        # New ids must sort after every stored one, even if the clock is behind them.
        for existing_id in self.store.iter_ids():
            self.id_generator.observe(existing_id)

    def restore(self, data: bytes) -> None:
        """Replace the stored aggregates with a :meth:`PersistentStore.dump` document."""
        self.store.restore(data)
        self._observe_stored_ids()

    async def drain(self) -> None:
        await self.event_bus.drain()

    def close(self) -> None:
        if self.is_closed:
            return

        self.is_closed = True
        self.storage.close()

    async def aclose(self) -> None:
        if self.is_closed:
            return

        await self.drain()
        self.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()
