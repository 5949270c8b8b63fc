from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, delete, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from localchat.storage.base import BaseStorage
from localchat.storage.sqlite.models import Base, StorageItemModel

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

MEMORY_URLS = frozenset({"sqlite://", "sqlite:///:memory:"})


def create_sqlite_sessionmaker(url: str = "sqlite://") -> tuple[Engine, sessionmaker[Session]]:
    if url in MEMORY_URLS:
        # In-memory databases live per connection, share one.
        engine = create_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(url)

    Base.metadata.create_all(engine)
    return engine, sessionmaker(engine, expire_on_commit=False)


class SQLiteStorage(BaseStorage):
    def __init__(self, engine: Engine, session_pool: sessionmaker[Session]) -> None:
        self._engine = engine
        self._session_pool = session_pool
        self.is_closed = False

    @classmethod
    def from_url(cls, url: str = "sqlite://") -> SQLiteStorage:
        return cls(*create_sqlite_sessionmaker(url))

    @property
    def engine(self) -> Engine:
        return self._engine

    def get_item(self, key: str) -> bytes | None:
        with self._session_pool() as session:
            stmt: Any = select(StorageItemModel.value).filter(StorageItemModel.key == key)
            return session.scalar(stmt)

    def set_item(self, key: str, value: bytes) -> None:
        now = datetime.now(UTC)
        stmt = (
            insert(StorageItemModel)
            .values(key=key, value=value, updated_at=now)
            .on_conflict_do_update(
                index_elements=["key"],
                set_={"value": value, "updated_at": now},
            )
        )
        with self._session_pool() as session:
            session.execute(stmt)
            session.commit()

    def remove_item(self, key: str) -> bool:
        stmt = delete(StorageItemModel).filter(StorageItemModel.key == key)
        with self._session_pool() as session:
            result = session.execute(stmt)
            session.commit()

        return bool(result.rowcount)

    def keys(self) -> Iterator[str]:
        with self._session_pool() as session:
            return iter(list(session.scalars(select(StorageItemModel.key))))

    def clear(self) -> None:
        with self._session_pool() as session:
            session.execute(delete(StorageItemModel))
            session.commit()

    def close(self) -> None:
        if self.is_closed:
            return

        self.is_closed = True
        self._engine.dispose()
        logger.info("SQLite storage closed")
