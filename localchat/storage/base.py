from __future__ import annotations

from abc import ABCMeta, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class BaseStorage(metaclass=ABCMeta):
    """Whole-value key-value substrate the persistent store writes through."""

    @abstractmethod
    def get_item(self, key: str) -> bytes | None: ...

    @abstractmethod
    def set_item(self, key: str, value: bytes) -> None: ...

    @abstractmethod
    def remove_item(self, key: str) -> bool: ...

    @abstractmethod
    def keys(self) -> Iterator[str]: ...

    @abstractmethod
    def clear(self) -> None: ...

    def close(self) -> None:  # noqa: B027
        return None

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get_item(key) is not None
