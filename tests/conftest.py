from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from localchat.app import ChatApplication
from localchat.events import AsyncEventBus, ImmediateEventBus
from localchat.storage import MemoryStorage

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from localchat.lc_types import Event, User


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def app(storage: MemoryStorage) -> Iterator[ChatApplication]:
    with ChatApplication(storage, ImmediateEventBus()) as application:
        yield application


@pytest.fixture
async def async_app(storage: MemoryStorage) -> AsyncIterator[ChatApplication]:
    async with ChatApplication(storage, AsyncEventBus(delay=0.01)) as application:
        yield application


@pytest.fixture
def received() -> list[Event]:
    return []


def make_user(app: ChatApplication, name: str, password: str = "secret") -> User:
    result = app.auth.signup(name, f"{name.lower()}@x.com", "+100000", password)
    assert result.success, result.message
    assert result.user is not None
    return result.user


@pytest.fixture
def alice(app: ChatApplication) -> User:
    return make_user(app, "Alice")


@pytest.fixture
def bob(app: ChatApplication) -> User:
    return make_user(app, "Bob")


@pytest.fixture
def carol(app: ChatApplication) -> User:
    return make_user(app, "Carol")
