# player/cache.py
from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Generic, Iterator, Optional, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")


class PreloadCache(Generic[V]):
    """
    Bounded store of primed resources keyed by asset URL.

    Eviction is FIFO by insertion order: once full, the oldest inserted entry
    goes first regardless of how recently it was read. Putting a key that is
    already present keeps the existing handle and returns False.
    """

    def __init__(self, capacity: int, name: str = "cache"):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self.name = name
        self._entries: "OrderedDict[str, V]" = OrderedDict()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def keys(self) -> list[str]:
        return list(self._entries)

    def get(self, key: str) -> Optional[V]:
        # No reordering on read.
        return self._entries.get(key)

    def put(self, key: str, value: V) -> bool:
        if key in self._entries:
            return False

        while len(self._entries) >= self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("%s: evicted %s", self.name, evicted)

        self._entries[key] = value
        return True

    def clear(self) -> None:
        self._entries.clear()
