from .base import BaseEventBus
from .bus import AsyncEventBus, ImmediateEventBus

__all__ = (
    "AsyncEventBus",
    "BaseEventBus",
    "ImmediateEventBus",
)
