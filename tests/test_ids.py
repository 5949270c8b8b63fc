from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

from localchat.ids import IdGenerator


def test_ids_strictly_increase_within_same_tick() -> None:
    generator = IdGenerator()

    with patch("localchat.ids.time.time_ns", return_value=1_700_000_000_000_000_000):
        ids = [generator.next_id() for _ in range(5)]

    assert [int(i) for i in ids] == [1_700_000_000_000_000 + n for n in range(5)]


def test_ids_survive_clock_going_back() -> None:
    generator = IdGenerator()
    generator.observe("9999999999999999")
    generator.observe("not-a-number")

    assert int(generator.next_id()) == 10_000_000_000_000_000


def test_ids_unique_across_threads() -> None:
    generator = IdGenerator()

    with ThreadPoolExecutor(max_workers=8) as pool:
        ids = list(pool.map(lambda _: generator.next_id(), range(2_000)))

    assert len(set(ids)) == len(ids)
