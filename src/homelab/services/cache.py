from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

V = TypeVar("V")

FAVICON_TTL = 24 * 60 * 60
FEED_ENTRIES_TTL = 15 * 60
COMMUNITY_POSTS_TTL = 10 * 60


@dataclass
class CacheEntry(Generic[V]):
    value: V
    fetched_at: float


class TTLCache(Generic[V]):
    """In-memory map of key -> (value, fetched_at) with a fixed time-to-live.

    Stale entries are not removed on read; they stay in place until the next
    ``put`` for the same key overwrites them. Memory is bounded by evicting the
    least recently used key once ``max_entries`` is exceeded.
    """

    def __init__(
        self,
        ttl: float,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry[V]] = OrderedDict()

    def get(self, key: str) -> V | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.fetched_at >= self.ttl:
            return None
        self._entries.move_to_end(key)
        return entry.value

    def put(self, key: str, value: V) -> None:
        self._entries[key] = CacheEntry(value=value, fetched_at=self._clock())
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
