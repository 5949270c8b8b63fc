from __future__ import annotations

import base64
import logging
from typing import TYPE_CHECKING

import msgspec
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from localchat.exceptions import StorageDecryptError
from localchat.storage.base import BaseStorage

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

logger = logging.getLogger(__name__)


def create_fernet(storage_key: str | bytes) -> Fernet:
    if isinstance(storage_key, str):
        storage_key = storage_key.encode()

    kdf = HKDF(algorithm=hashes.SHA3_512(), length=32, salt=None, info=b"localchat")
    return Fernet(base64.urlsafe_b64encode(kdf.derive(storage_key)))


class JSONFileStorage(BaseStorage):
    """
    All keys in a single JSON document on disk.

    Values are kept as text inside the document and the whole file is
    rewritten on every change. When a ``storage_key`` is given the document
    is encrypted with Fernet.

    :param path: Location of the document. Parent directories are created.
    :type path: Path
    :param storage_key: Optional secret the encryption key is derived from.
    :type storage_key: str | bytes | None
    :raises StorageDecryptError: The existing document was encrypted with another key.
    """

    def __init__(self, path: Path, storage_key: str | bytes | None = None) -> None:
        self.path = path
        self._fernet = create_fernet(storage_key) if storage_key is not None else None
        self._items: dict[str, str] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return

        data = self.path.read_bytes()
        if not data:
            return

        if self._fernet is not None:
            try:
                data = self._fernet.decrypt(data)
            except InvalidToken as e:
                raise StorageDecryptError(path=self.path) from e

        try:
            self._items.update(msgspec.json.decode(data, type=dict[str, str]))
        except msgspec.DecodeError as e:
            logger.warning("Storage %s is corrupt, starting empty: %s", self.path, e.args)

    def _flush(self) -> None:
        data = msgspec.json.encode(self._items)
        if self._fernet is not None:
            data = self._fernet.encrypt(data)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_bytes(data)
        tmp_path.replace(self.path)

    def get_item(self, key: str) -> bytes | None:
        value = self._items.get(key)
        return value.encode() if value is not None else None

    def set_item(self, key: str, value: bytes) -> None:
        self._items[key] = value.decode()
        self._flush()

    def remove_item(self, key: str) -> bool:
        if self._items.pop(key, None) is None:
            return False

        self._flush()
        return True

    def keys(self) -> Iterator[str]:
        return iter(list(self._items))

    def clear(self) -> None:
        self._items.clear()
        self._flush()
