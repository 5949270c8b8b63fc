from .storage import SQLiteStorage, create_sqlite_sessionmaker

__all__ = (
    "SQLiteStorage",
    "create_sqlite_sessionmaker",
)
