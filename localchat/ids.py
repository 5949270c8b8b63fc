from __future__ import annotations

import threading
import time


class IdGenerator:
    """
    Time-based identifier source.

    Ids are decimal strings of the creation time in microseconds. Two ids
    created within the same microsecond are separated by bumping the later
    one, so every id is strictly greater than the previous one and can be
    used as the ordering key of the store.
    """

    def __init__(self, last: int = 0) -> None:
        self._last = last
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            candidate = time.time_ns() // 1_000
            self._last = max(candidate, self._last + 1)
            return str(self._last)

    def observe(self, existing_id: str) -> None:
        """Never hand out an id lower than ``existing_id``."""
        try:
            value = int(existing_id)
        except ValueError:
            return

        with self._lock:
            self._last = max(self._last, value)
