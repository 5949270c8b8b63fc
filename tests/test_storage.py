from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from localchat.exceptions import StorageDecryptError
from localchat.storage import BaseStorage, JSONFileStorage, MemoryStorage, SQLiteStorage

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(params=["memory", "file", "encrypted", "sqlite"])
def any_storage(request: pytest.FixtureRequest, tmp_path: Path) -> Iterator[BaseStorage]:
    match request.param:
        case "memory":
            storage: BaseStorage = MemoryStorage()
        case "file":
            storage = JSONFileStorage(tmp_path / "store.json")
        case "encrypted":
            storage = JSONFileStorage(tmp_path / "store.bin", storage_key="s3cret")
        case _:
            storage = SQLiteStorage.from_url("sqlite://")

    yield storage
    storage.close()


def test_basic_operations(any_storage: BaseStorage) -> None:
    assert any_storage.get_item("chats") is None
    assert "chats" not in any_storage

    any_storage.set_item("chats", b"[]")
    any_storage.set_item("chats", b'[{"id":"1"}]')
    any_storage.set_item("messages", b"{}")

    assert any_storage.get_item("chats") == b'[{"id":"1"}]'
    assert "chats" in any_storage
    assert sorted(any_storage.keys()) == ["chats", "messages"]

    assert any_storage.remove_item("chats") is True
    assert any_storage.remove_item("chats") is False
    assert any_storage.get_item("chats") is None

    any_storage.clear()
    assert list(any_storage.keys()) == []


def test_file_storage_persists(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "store.json"
    JSONFileStorage(path).set_item("auth-state", b'{"users":[]}')

    assert path.exists()
    assert JSONFileStorage(path).get_item("auth-state") == b'{"users":[]}'


def test_encrypted_file_storage(tmp_path: Path) -> None:
    path = tmp_path / "store.bin"
    JSONFileStorage(path, storage_key=b"key").set_item("chats", b"[]")

    assert b"chats" not in path.read_bytes()
    assert JSONFileStorage(path, storage_key="key").get_item("chats") == b"[]"


def test_wrong_key_keeps_encrypted_document(tmp_path: Path) -> None:
    path = tmp_path / "store.bin"
    JSONFileStorage(path, storage_key="right").set_item("chats", b"[1,2,3]")
    original = path.read_bytes()

    with pytest.raises(StorageDecryptError) as exc_info:
        JSONFileStorage(path, storage_key="wrong")

    assert exc_info.value.path == path
    assert path.read_bytes() == original
    assert JSONFileStorage(path, storage_key="right").get_item("chats") == b"[1,2,3]"


def test_corrupt_file_starts_empty(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_bytes(b"{not json")

    storage = JSONFileStorage(path)

    assert list(storage.keys()) == []
    storage.set_item("chats", b"[]")
    assert JSONFileStorage(path).get_item("chats") == b"[]"


def test_sqlite_storage_persists(tmp_path: Path) -> None:
    url = f"sqlite:///{tmp_path / 'store.sqlite3'}"
    storage = SQLiteStorage.from_url(url)
    storage.set_item("messages", b"{}")
    storage.close()
    assert storage.is_closed

    reopened = SQLiteStorage.from_url(url)
    assert reopened.get_item("messages") == b"{}"
    reopened.close()
