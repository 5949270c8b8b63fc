from .base import BaseStorage
from .file import JSONFileStorage
from .memory import MemoryStorage
from .sqlite import SQLiteStorage

__all__ = (
    "BaseStorage",
    "JSONFileStorage",
    "MemoryStorage",
    "SQLiteStorage",
)
