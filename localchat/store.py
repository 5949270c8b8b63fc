from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, TypeVar

import msgspec
from msgspec import Struct

from localchat.config import StorageSettings
from localchat.lc_types import AuthState, Chat, Message

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from localchat.storage.base import BaseStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")

MessagesByChat = dict[str, list[Message]]


class StoreSnapshot(Struct, kw_only=True, rename="camel"):
    auth_state: AuthState = msgspec.field(default_factory=AuthState)
    chats: list[Chat] = msgspec.field(default_factory=list)
    messages: MessagesByChat = msgspec.field(default_factory=dict)


class PersistentStore:
    """
    Typed snapshot access to the three aggregates kept in a storage.

    Every read decodes a whole collection and every write replaces it. Callers
    that read, modify and write back must do so inside :meth:`transaction`.
    """

    def __init__(self, storage: BaseStorage, settings: StorageSettings | None = None) -> None:
        settings = settings or StorageSettings()
        self.storage = storage
        self.auth_key = settings.key_prefix + settings.auth_key
        self.chats_key = settings.key_prefix + settings.chats_key
        self.messages_key = settings.key_prefix + settings.messages_key
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            yield

    def load(self, key: str, type_: type[T], default_factory: Callable[[], T]) -> T:
        raw = self.storage.get_item(key)
        if raw is None:
            return default_factory()

        try:
            return msgspec.json.decode(raw, type=type_)
        except (msgspec.DecodeError, msgspec.ValidationError) as e:
            logger.warning("Stored value under %r is corrupt, using default: %s", key, e.args)
            return default_factory()

    def save(self, key: str, value: Any) -> None:
        self.storage.set_item(key, msgspec.json.encode(value))

    def load_auth_state(self) -> AuthState:
        return self.load(self.auth_key, AuthState, AuthState)

    def save_auth_state(self, state: AuthState) -> None:
        self.save(self.auth_key, state)

    def load_chats(self) -> list[Chat]:
        return self.load(self.chats_key, list[Chat], list)

    def save_chats(self, chats: list[Chat]) -> None:
        self.save(self.chats_key, chats)

    def load_messages(self) -> MessagesByChat:
        return self.load(self.messages_key, MessagesByChat, dict)

    def save_messages(self, messages: MessagesByChat) -> None:
        self.save(self.messages_key, messages)

    def dump(self) -> bytes:
        with self.transaction():
            snapshot = StoreSnapshot(
                auth_state=self.load_auth_state(),
                chats=self.load_chats(),
                messages=self.load_messages(),
            )
        return msgspec.json.encode(snapshot)

    def restore(self, data: bytes) -> None:
        snapshot = msgspec.json.decode(data, type=StoreSnapshot)
        with self.transaction():
            self.save_auth_state(snapshot.auth_state)
            self.save_chats(snapshot.chats)
            self.save_messages(snapshot.messages)

        logger.info(
            "Restored %d users, %d chats",
            len(snapshot.auth_state.users),
            len(snapshot.chats),
        )

    def iter_ids(self) -> Iterator[str]:
        """Every entity id currently stored."""
        state = self.load_auth_state()
        yield from (user.id for user in state.users)
        yield from (chat.id for chat in self.load_chats())
        for messages in self.load_messages().values():
            yield from (message.id for message in messages)
