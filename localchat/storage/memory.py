from __future__ import annotations

from typing import TYPE_CHECKING

from localchat.storage.base import BaseStorage

if TYPE_CHECKING:
    from collections.abc import Iterator


class MemoryStorage(BaseStorage):
    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._items: dict[str, bytes] = dict(initial or {})

    def get_item(self, key: str) -> bytes | None:
        return self._items.get(key)

    def set_item(self, key: str, value: bytes) -> None:
        self._items[key] = bytes(value)

    def remove_item(self, key: str) -> bool:
        return self._items.pop(key, None) is not None

    def keys(self) -> Iterator[str]:
        return iter(list(self._items))

    def clear(self) -> None:
        self._items.clear()
